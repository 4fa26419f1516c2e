"""
matrix.py
─────────
Packed symmetric distance matrix with an implied zero diagonal.

Only the strict upper triangle is stored, row by row, in the same "condensed"
layout SciPy uses (``scipy.spatial.distance.squareform``):

    n = 4     (0,1) (0,2) (0,3) (1,2) (1,3) (2,3)
    offset      0     1     2     3     4     5

so ``m.condensed`` can go straight into ``scipy.cluster.hierarchy.linkage``.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from scipy.spatial.distance import squareform


class SymmetricMatrix:
    """n×n view over ``n(n-1)/2`` stored distances; ``m[i, j] == m[j, i]``."""

    def __init__(self, n: int, data: Optional[np.ndarray] = None, dtype=np.float64):
        self.n = int(n)
        size = self.n * (self.n - 1) // 2
        if data is None:
            data = np.zeros(size, dtype=dtype)
        elif data.shape != (size,):
            raise ValueError(f"condensed data for n={self.n} needs shape ({size},), got {data.shape}")
        self._data = data

    @classmethod
    def from_dense(cls, dense: np.ndarray) -> "SymmetricMatrix":
        dense = np.asarray(dense, dtype=np.float64)
        if dense.ndim != 2 or dense.shape[0] != dense.shape[1]:
            raise ValueError("dense matrix must be square")
        n = dense.shape[0]
        iu = np.triu_indices(n, k=1)
        return cls(n, dense[iu].copy())

    # ---------- indexing -----------------------------------------------------
    def _offset(self, i: int, j: int) -> int:
        if i > j:
            i, j = j, i
        return self.n * i - i * (i + 1) // 2 + (j - i - 1)

    def _check(self, i: int, j: int) -> Tuple[int, int]:
        i, j = int(i), int(j)
        if not (0 <= i < self.n and 0 <= j < self.n):
            raise IndexError(f"index ({i}, {j}) out of range for {self.n}×{self.n} matrix")
        return i, j

    def __getitem__(self, key: Tuple[int, int]) -> float:
        i, j = self._check(*key)
        if i == j:
            return 0.0
        return float(self._data[self._offset(i, j)])

    def __setitem__(self, key: Tuple[int, int], value: float) -> None:
        i, j = self._check(*key)
        if i == j:
            if value != 0:
                raise ValueError("diagonal of a distance matrix is fixed at 0")
            return
        self._data[self._offset(i, j)] = value

    # ---------- conversions --------------------------------------------------
    @property
    def shape(self) -> Tuple[int, int]:
        return self.n, self.n

    def __len__(self) -> int:
        return self.n

    @property
    def condensed(self) -> np.ndarray:
        return self._data

    def to_dense(self) -> np.ndarray:
        if self.n <= 1:
            return np.zeros((self.n, self.n), dtype=self._data.dtype)
        return squareform(self._data, checks=False)

    def __array__(self, dtype=None, copy=None):
        if copy is False:
            raise ValueError("a packed SymmetricMatrix can only be converted by copying")
        dense = self.to_dense()
        return dense if dtype is None else dense.astype(dtype)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SymmetricMatrix):
            return NotImplemented
        return self.n == other.n and np.array_equal(self._data, other._data)

    __hash__ = None

    def __repr__(self) -> str:
        return f"SymmetricMatrix(n={self.n})"
