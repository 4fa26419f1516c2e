"""
compressors.py
──────────────
Byte counters for the two lossless codecs the NCD engine can use.

Only the *length* of the compressed stream matters for NCD, so every
compressor here pushes its input through an incremental std-lib codec and
keeps a running count of the bytes it emits; the compressed bytes themselves
are dropped as soon as they are counted.

    gzip   → zlib.compressobj(level, wbits=31)   (gzip container)
    bzip2  → bz2.BZ2Compressor(level)

Level presets
    preset              gzip   bzip2
    default              -1      6       (-1 is zlib's own default, i.e. 6)
    best_speed            1      1
    best_compression      9      9
"""

from __future__ import annotations

import bz2
import enum
import os
import zlib
from typing import Dict, Iterator, Optional, Union

from ..errors import InvalidInputError, SourceIOError

Item = Union[str, bytes, bytearray, memoryview, "os.PathLike[str]"]

READ_CHUNK = 1 << 16           # 64 KiB per file read


class Algorithm(str, enum.Enum):
    GZIP = "gzip"
    BZIP2 = "bzip2"


class CompressionLevel(str, enum.Enum):
    DEFAULT = "default"
    BEST_SPEED = "best_speed"
    BEST_COMPRESSION = "best_compression"


def _as_enum(kind, value):
    try:
        return kind(value)
    except ValueError:
        names = ", ".join(m.value for m in kind)
        raise InvalidInputError(f"unknown {kind.__name__} {value!r} (expected one of: {names})") from None


class Compressor:
    """Counts compressed bytes for one or two concatenated inputs.

    Subclasses provide ``LEVELS`` (preset → numeric level) and ``_codec`` which
    returns a fresh incremental compressor object exposing ``compress`` and
    ``flush``.
    """

    algorithm: Algorithm
    LEVELS: Dict[CompressionLevel, int] = {}

    def __init__(self, level: Union[CompressionLevel, str] = CompressionLevel.DEFAULT,
                 chunk_size: int = READ_CHUNK) -> None:
        if type(self) is Compressor:
            raise TypeError("Compressor is abstract; use GzipCompressor, Bzip2Compressor or make_compressor")
        self.level = _as_enum(CompressionLevel, level)
        self.chunk_size = int(chunk_size)

    @property
    def numeric_level(self) -> int:
        return self.LEVELS[self.level]

    def _codec(self):
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(level={self.level.value!r})"

    # ---------- input streaming ----------------------------------------------
    def _literal_chunks(self, item: Item) -> Iterator[bytes]:
        if isinstance(item, str):
            yield item.encode("utf-8")
        elif isinstance(item, (bytes, bytearray, memoryview)):
            yield bytes(item)
        else:
            raise InvalidInputError(f"literal items must be str or bytes, got {type(item).__name__}")

    def _file_chunks(self, item: Item) -> Iterator[bytes]:
        path = os.fspath(item)
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        if not path:
            raise InvalidInputError("file path must not be empty")
        try:
            fh = open(path, "rb")
        except OSError as exc:
            raise SourceIOError(path) from exc
        with fh:
            while True:
                try:
                    block = fh.read(self.chunk_size)
                except OSError as exc:
                    raise SourceIOError(path, f"file can not be read: {path}") from exc
                if not block:
                    break
                yield block

    # ---------- public API ---------------------------------------------------
    def compressed_size(self, first: Item, second: Optional[Item] = None, *,
                        is_file: bool = False) -> int:
        """Compressed length of ``first`` (followed by ``second``, if given).

        Both sources go into one compressor stream, the first one completely
        before the second; nothing but the byte count is kept.
        """
        chunks = self._file_chunks if is_file else self._literal_chunks
        codec = self._codec()
        n_in = n_out = 0
        for source in (first, second):
            if source is None:
                continue
            for block in chunks(source):
                n_in += len(block)
                n_out += len(codec.compress(block))
        if n_in == 0:
            raise InvalidInputError("input must contain at least one byte")
        return n_out + len(codec.flush())


class GzipCompressor(Compressor):
    algorithm = Algorithm.GZIP
    LEVELS = {
        CompressionLevel.DEFAULT: zlib.Z_DEFAULT_COMPRESSION,
        CompressionLevel.BEST_SPEED: zlib.Z_BEST_SPEED,
        CompressionLevel.BEST_COMPRESSION: zlib.Z_BEST_COMPRESSION,
    }

    def _codec(self):
        # wbits 16+15 → gzip header/trailer around a 32 KiB-window deflate stream
        return zlib.compressobj(self.numeric_level, zlib.DEFLATED, 31)


class Bzip2Compressor(Compressor):
    algorithm = Algorithm.BZIP2
    LEVELS = {
        CompressionLevel.DEFAULT: 6,
        CompressionLevel.BEST_SPEED: 1,
        CompressionLevel.BEST_COMPRESSION: 9,
    }

    def _codec(self):
        return bz2.BZ2Compressor(self.numeric_level)


_BY_ALGORITHM = {c.algorithm: c for c in (GzipCompressor, Bzip2Compressor)}


def make_compressor(algorithm: Union[Algorithm, str] = Algorithm.GZIP,
                    level: Union[CompressionLevel, str] = CompressionLevel.DEFAULT,
                    chunk_size: int = READ_CHUNK) -> Compressor:
    """Compressor instance for ``algorithm`` at preset ``level``."""
    return _BY_ALGORITHM[_as_enum(Algorithm, algorithm)](level, chunk_size=chunk_size)
