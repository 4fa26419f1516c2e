"""
analysis.py
───────────
Helpers for looking at an NCD matrix once it is computed: labelled tables,
hierarchical clustering, flat cluster labels with their silhouette score,
nearest neighbours and a 2-D MDS embedding.

All functions accept either a dense ``numpy.ndarray`` (e.g. from
``NCDEngine.unsymmetric``) or a ``SymmetricMatrix``.  Clustering and MDS
need a symmetric input, so a dense asymmetric matrix is symmetrised with
``(D + Dᵀ) / 2`` first.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import fcluster, linkage
from sklearn.manifold import MDS
from sklearn.metrics import silhouette_score

from .models.matrix import SymmetricMatrix

Matrix = Union[np.ndarray, SymmetricMatrix]


def _dense(matrix: Matrix) -> np.ndarray:
    dense = np.asarray(matrix, dtype=np.float64)
    if dense.ndim != 2 or dense.shape[0] != dense.shape[1]:
        raise ValueError("distance matrix must be square")
    return dense


def _symmetric(matrix: Matrix) -> SymmetricMatrix:
    if isinstance(matrix, SymmetricMatrix):
        return matrix
    dense = _dense(matrix)
    return SymmetricMatrix.from_dense((dense + dense.T) / 2.0)


def to_frame(matrix: Matrix, labels: Optional[Sequence[str]] = None) -> pd.DataFrame:
    dense = _dense(matrix)
    if labels is not None and len(labels) != len(dense):
        raise ValueError(f"{len(labels)} labels for a {len(dense)}×{len(dense)} matrix")
    return pd.DataFrame(dense, index=labels, columns=labels)


def cluster(matrix: Matrix, method: str = "average") -> np.ndarray:
    """SciPy linkage matrix over the condensed distances."""
    sym = _symmetric(matrix)
    if sym.n < 2:
        raise ValueError("need at least two items to cluster")
    return linkage(sym.condensed, method=method)


def nearest(matrix: Matrix, k: int = 1) -> np.ndarray:
    """Indices of the ``k`` closest other items for every row (ties → lower index)."""
    dense = _dense(matrix).copy()
    n = len(dense)
    if not 1 <= k < n:
        raise ValueError(f"k must be in [1, {n - 1}]")
    np.fill_diagonal(dense, np.inf)
    return np.argsort(dense, axis=1, kind="stable")[:, :k]


def flat_clusters(matrix: Matrix, n_clusters: int, method: str = "average") -> np.ndarray:
    """Cut the linkage tree into at most ``n_clusters`` groups (labels start at 1)."""
    return fcluster(cluster(matrix, method=method), t=n_clusters, criterion="maxclust")


def silhouette(matrix: Matrix, labels: Sequence[int]) -> float:
    """Mean silhouette of ``labels`` under the NCD distances."""
    dense = np.asarray(_symmetric(matrix))
    return float(silhouette_score(dense, labels, metric="precomputed"))


def embed(matrix: Matrix, n_components: int = 2, seed: int = 0) -> np.ndarray:
    """Metric MDS coordinates, shape (n, n_components)."""
    dense = np.asarray(_symmetric(matrix))
    mds = MDS(n_components=n_components, dissimilarity="precomputed",
              random_state=seed, n_init=4)
    return mds.fit_transform(dense)
