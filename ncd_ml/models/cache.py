"""
cache.py
────────
Per-batch memo of standalone compressed sizes, one cell per item index.

A cell holding ``0`` has not been computed yet; any real compressed size is
positive because empty inputs are rejected by the compressor.

Worker threads share one cache without a lock.  Two workers that miss on the
same index at the same time both compress the item and both store the result
into the same cell.  The compressor is deterministic, so the second write
stores the value the first one already put there.  The duplicate work is
bounded by the number of workers and happens at most once per index; a
per-cell lock would serialise every lookup instead.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .compressors import Compressor, Item


class CompressedSizeCache:
    """Lazily filled ``index → C(item)`` table for one batch."""

    def __init__(self, sources: Sequence[Item], compressor: Compressor, is_file: bool = False):
        self.sources = sources
        self.compressor = compressor
        self.is_file = bool(is_file)
        self._sizes = np.zeros(len(sources), dtype=np.int64)

    def __len__(self) -> int:
        return len(self._sizes)

    def prime(self, index: int) -> int:
        """Compress ``sources[index]`` now and store the size."""
        size = self.compressor.compressed_size(self.sources[index], is_file=self.is_file)
        self._sizes[index] = size
        return size

    def get_or_compute(self, index: int) -> int:
        size = int(self._sizes[index])
        if size == 0:
            size = self.prime(index)
        return size

    @property
    def sizes(self) -> np.ndarray:
        """Copy of the table (zeros where nothing was computed)."""
        return self._sizes.copy()
