"""
─────────────────────────────────────────────────────────────────────────────
 ncd.py — Normalised Compression Distance (NCD) between items and batches
─────────────────────────────────────────────────────────────────────────────

PURPOSE
───────
Compute the **Normalised Compression Distance** for a pair of items or for
every pair in a batch:

    NCD(x, y) =
        ( C(x ‖ y) − min[C(x), C(y)] )
        ───────────────────────────────
               max[C(x), C(y)]

where  C(·)  is the byte-length after lossless compression (gzip or bzip2)
and  ‖  is concatenation.  Lower = more similar.  An item is either a literal
(str / bytes) or, with ``is_file=True``, a path whose contents are streamed.

MODULE CONTENTS
───────────────
`NCDEngine.calculate(a, b)`          → raw NCD of one pair (may exceed 1)
`NCDEngine.calculate_clamped(a, b)`  → same, clipped to [0, 1]
`NCDEngine.unsymmetric(items)`       → dense n×n, both concatenation orders
`NCDEngine.symmetric(items)`         → packed n×n, order (i, j) only, threaded

Algorithm
─────────
unsymmetric / sequential symmetric
    for i in 0 … n-1:
        for j in i+1 … n-1:
            C(j) is compressed on the first row (i == 0) and cached
            out[i, j] = clip(  (C(i‖j) − min) / max  )
            out[j, i] = clip(  (C(j‖i) − min) / max  )     # unsymmetric only

parallel symmetric  (workers > 1)
    1. compress items 0 and n-1 up front
    2. wavefront_partition(n, workers) → one static bucket per thread
    3. each thread walks its bucket, fills missing cache cells and writes
       its own cells of the packed matrix
    4. join; the first worker error is re-raised, the partial matrix dropped

Every batch call builds its own context (items, cache, compressor), so one
engine can be shared between threads; only the level is mutable.

CAVEATS
───────
✗ Compressor framing (gzip header ≈ 18 B) can push short-item ratios past 1;
  batch results are clipped, `calculate` is not.
✗ C(x‖y) ≠ C(y‖x) in general, hence the two orders in `unsymmetric`; the
  symmetric matrix keeps the (i, j) order only.
✗ Not a true metric: the triangle inequality can fail.
─────────────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import InvalidInputError
from .cache import CompressedSizeCache
from .compressors import (READ_CHUNK, Algorithm, CompressionLevel, Compressor, Item,
                          make_compressor)
from .matrix import SymmetricMatrix
from .wavefront import bucket_loads, wavefront_partition

logger = logging.getLogger(__name__)

ProgressCallback = Optional[Callable[[int, int], None]]


def clamp01(x: float) -> float:
    return min(1.0, max(0.0, x))


def ncd_ratio(c_joint: int, c_first: int, c_second: int) -> float:
    """Raw NCD from the three compressed sizes."""
    return (c_joint - min(c_first, c_second)) / float(max(c_first, c_second))


def _row_major(n: int) -> Iterator[Tuple[int, int]]:
    for i in range(n):
        for j in range(i + 1, n):
            yield i, j


@dataclass
class _Batch:
    sources: Sequence[Item]
    is_file: bool
    compressor: Compressor
    cache: CompressedSizeCache

    @property
    def n(self) -> int:
        return len(self.sources)

    @property
    def n_pairs(self) -> int:
        return self.n * (self.n - 1) // 2

    def distance(self, first: int, second: int) -> float:
        """Clipped NCD of ``sources[first] ‖ sources[second]``."""
        c1 = self.cache.get_or_compute(first)
        c2 = self.cache.get_or_compute(second)
        joint = self.compressor.compressed_size(self.sources[first], self.sources[second],
                                                is_file=self.is_file)
        return clamp01(ncd_ratio(joint, c1, c2))


class NCDEngine:
    """Pairwise and batch NCD with a fixed codec.

    Parameters
    ----------
    algorithm : {'gzip', 'bzip2'}, default 'gzip'
        Codec used for every compression; fixed for the engine's lifetime.
    level : {'default', 'best_speed', 'best_compression'}
        Initial level preset, see `set_compression_level`.
    workers : int, optional
        Thread count for `symmetric`.  ``None`` uses ``os.cpu_count()``;
        ``1`` selects the sequential fill.
    chunk_size : int
        Read size for file items.
    """

    def __init__(self,
                 algorithm: Union[Algorithm, str] = Algorithm.GZIP,
                 level:     Union[CompressionLevel, str] = CompressionLevel.DEFAULT,
                 workers:   Optional[int] = None,
                 chunk_size: int = READ_CHUNK):
        if workers is None:
            workers = os.cpu_count() or 1
        if int(workers) < 1:
            raise InvalidInputError("workers must be at least one")
        self._workers = int(workers)
        self._chunk_size = int(chunk_size)
        self._compressor = make_compressor(algorithm, level, self._chunk_size)

    @classmethod
    def from_config(cls, config) -> "NCDEngine":
        return cls(config.algorithm, config.level, config.workers, config.chunk_size)

    # ---------- configuration ------------------------------------------------
    @property
    def algorithm(self) -> Algorithm:
        return self._compressor.algorithm

    @property
    def level(self) -> CompressionLevel:
        return self._compressor.level

    @property
    def workers(self) -> int:
        return self._workers

    def set_compression_level(self, level: Union[CompressionLevel, str] = CompressionLevel.DEFAULT) -> None:
        """Switch the level preset for compressions started after this call.

        Batches already running keep the compressor they started with.
        """
        self._compressor = make_compressor(self.algorithm, level, self._chunk_size)

    def __repr__(self) -> str:
        return (f"NCDEngine(algorithm={self.algorithm.value!r}, level={self.level.value!r}, "
                f"workers={self._workers})")

    # ---------- single pair --------------------------------------------------
    def calculate(self, a: Item, b: Item, is_file: bool = False) -> float:
        """Raw NCD of ``a`` and ``b``; not clipped, so it can exceed 1."""
        comp = self._compressor
        c_a = comp.compressed_size(a, is_file=is_file)
        c_b = comp.compressed_size(b, is_file=is_file)
        return ncd_ratio(comp.compressed_size(a, b, is_file=is_file), c_a, c_b)

    def calculate_clamped(self, a: Item, b: Item, is_file: bool = False) -> float:
        return clamp01(self.calculate(a, b, is_file=is_file))

    # ---------- batches ------------------------------------------------------
    def _new_batch(self, items: Sequence[Item], is_file: bool) -> _Batch:
        sources = list(items)
        if not sources:
            raise InvalidInputError("batch must contain at least one item")
        compressor = self._compressor
        return _Batch(sources, bool(is_file), compressor,
                      CompressedSizeCache(sources, compressor, is_file))

    def unsymmetric(self, items: Sequence[Item], is_file: bool = False,
                    progress: ProgressCallback = None) -> np.ndarray:
        """Dense n×n NCD matrix; ``out[i, j]`` uses ``i ‖ j``, ``out[j, i]`` uses ``j ‖ i``."""
        batch = self._new_batch(items, is_file)
        n, total = batch.n, batch.n_pairs
        logger.debug("unsymmetric: %d items, %d pairs (%s)", n, total, batch.compressor)

        out = np.zeros((n, n), dtype=np.float64)
        batch.cache.get_or_compute(0)
        for done, (i, j) in enumerate(_row_major(n), start=1):
            out[i, j] = batch.distance(i, j)
            out[j, i] = batch.distance(j, i)
            if progress:
                progress(done, total)
        return out

    def symmetric(self, items: Sequence[Item], is_file: bool = False,
                  progress: ProgressCallback = None) -> SymmetricMatrix:
        """Packed n×n NCD matrix from the ``i ‖ j`` order (i < j) only."""
        batch = self._new_batch(items, is_file)
        out = SymmetricMatrix(batch.n)
        logger.debug("symmetric: %d items, %d pairs, %d workers (%s)",
                     batch.n, batch.n_pairs, self._workers, batch.compressor)

        if self._workers > 1:
            self._fill_parallel(batch, out, progress)
        else:
            batch.cache.get_or_compute(0)
            for done, (i, j) in enumerate(_row_major(batch.n), start=1):
                out[i, j] = batch.distance(i, j)
                if progress:
                    progress(done, batch.n_pairs)
        return out

    def _fill_parallel(self, batch: _Batch, out: SymmetricMatrix,
                       progress: ProgressCallback) -> None:
        # the first pairs of every bucket touch rows 0 and n-1
        batch.cache.prime(0)
        batch.cache.get_or_compute(batch.n - 1)

        partition = wavefront_partition(batch.n, self._workers)
        logger.debug("wavefront loads: %s", bucket_loads(partition))
        stop = threading.Event()

        def work(bucket: int) -> int:
            count = 0
            for i, j in partition[bucket]:
                if stop.is_set():
                    break
                out[i, j] = batch.distance(i, j)
                count += 1
            return count

        done = 0
        first_error: Optional[BaseException] = None
        with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="ncd") as executor:
            futures = {executor.submit(work, b): b for b, pairs in partition.items() if pairs}
            for completed in as_completed(futures):
                if completed.cancelled():
                    continue
                exc = completed.exception()
                if exc is not None:
                    if first_error is None:
                        first_error = exc
                        logger.warning("worker %d failed, aborting batch: %s", futures[completed], exc)
                        stop.set()
                        for fut in futures:
                            fut.cancel()
                    continue
                done += completed.result()
                if progress and first_error is None:
                    progress(done, batch.n_pairs)

        if first_error is not None:
            raise first_error
