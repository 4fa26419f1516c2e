"""Normalised Compression Distance matrices with gzip / bzip2."""

__version__ = "0.1.0"
