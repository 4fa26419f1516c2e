"""
datamodules_npy.py
──────────────────
Turn files and .npy waveforms into item lists for the NCD engine.
"""

from __future__ import annotations

import glob
from pathlib import Path
from typing import Iterable, List, Union

import numpy as np

from .errors import InvalidInputError, SourceIOError


def collect_files(patterns: Iterable[Union[str, Path]]) -> List[Path]:
    """Expand paths / glob patterns into a sorted list of non-empty files.

    Directories are skipped; so are empty files, which the compressor would
    reject anyway.
    """
    found = set()
    for pat in patterns:
        pat = str(pat)
        matches = glob.glob(pat, recursive=True) if glob.has_magic(pat) else [pat]
        for m in matches:
            p = Path(m)
            if p.is_file() and p.stat().st_size > 0:
                found.add(p)
    if not found:
        raise InvalidInputError("no non-empty files match the given paths")
    return sorted(found)


def quantise_windows(win: np.ndarray, *, per_win_norm: bool = False,
                     diff_order: int = 0) -> List[bytes]:
    """One int16 byte string per window.

    Parameters
    ----------
    win : numpy.ndarray, shape (n_win, win_len)
        Windows to compare, float samples in roughly [-1, 1].
    per_win_norm : bool, default False
        Remove each window's mean and scale by its peak amplitude first.
    diff_order : int, default 0
        ``numpy.diff`` order applied along the time axis before quantising.
    """
    if win.ndim != 2:
        raise ValueError("windows must be 2-D (n_win, win_len)")

    arr = win.astype(np.float32, copy=False)
    if diff_order > 0:
        arr = np.diff(arr, n=diff_order, axis=1)
    if per_win_norm:
        arr = arr - arr.mean(axis=1, keepdims=True)
        peak = np.abs(arr).max(axis=1, keepdims=True)
        arr = np.divide(arr, peak + 1e-9, out=arr)
    w_i16 = np.round(np.clip(arr, -1.0, 1.0) * 32767).astype(np.int16, copy=False)
    return [w.tobytes() for w in w_i16]


# ──────────────────────────────────────────────────────────────────────────────
class WindowItems:
    """
    Slice a single .npy waveform into fixed-length windows, one NCD item each.

    Parameters
    ----------
    npy_path : str
        Path to a 1-D .npy waveform.
    chunk_size : int
        Number of samples per window.
    overlap : float in [0,1)
        0   → non-overlapping windows (hop == chunk_size)
        0.5 → 50 % overlap (hop == chunk_size / 2) etc.
    """
    def __init__(self,
                 npy_path: Union[str, Path],
                 chunk_size: int = 4096,
                 overlap:    float = 0.0):

        self.npy_path   = Path(npy_path)
        self.chunk_size = int(chunk_size)
        self.overlap    = float(overlap)

        self.hop = int(self.chunk_size * (1 - self.overlap))
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.hop <= 0:
            raise ValueError("overlap must be < 1.0")

        # ---------- load waveform lazily (memory-mapped) ---------------------
        try:
            self.wave = np.load(self.npy_path, mmap_mode="r")
        except OSError as exc:
            raise SourceIOError(self.npy_path) from exc
        if self.wave.ndim != 1:
            raise ValueError("waveform must be 1-D")
        if len(self.wave) < self.chunk_size:
            raise InvalidInputError("waveform is shorter than one window")

        self.n_win = 1 + (len(self.wave) - self.chunk_size) // self.hop
        self._windows = np.lib.stride_tricks.as_strided(
            self.wave,
            shape   =(self.n_win, self.chunk_size),
            strides =(self.wave.strides[0]*self.hop, self.wave.strides[0]),
            writeable=False,
        )

    def __len__(self) -> int:
        return self.n_win

    @property
    def windows(self) -> np.ndarray:
        return self._windows

    def labels(self) -> List[str]:
        """Start sample of each window, as row/column labels."""
        return [str(i * self.hop) for i in range(self.n_win)]

    def items(self, **kw) -> List[bytes]:
        """Quantised windows; keyword arguments go to `quantise_windows`."""
        return quantise_windows(self._windows, **kw)
