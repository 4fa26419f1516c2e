from __future__ import annotations

import numpy as np
import pytest
from scipy.spatial.distance import squareform

from ncd_ml.models.matrix import SymmetricMatrix


def test_layout_matches_scipy_condensed() -> None:
    m = SymmetricMatrix(4)
    value = 0.0
    for i in range(4):
        for j in range(i + 1, 4):
            value += 0.1
            m[i, j] = value
    dense = np.asarray(m)
    np.testing.assert_allclose(dense, squareform(m.condensed))
    assert dense[0, 3] == pytest.approx(0.3)
    assert dense[2, 3] == pytest.approx(0.6)


def test_mirror_and_diagonal() -> None:
    m = SymmetricMatrix(3)
    m[2, 0] = 0.5
    assert m[0, 2] == m[2, 0] == 0.5
    assert m[1, 1] == 0.0
    m[1, 1] = 0
    with pytest.raises(ValueError):
        m[1, 1] = 0.2


def test_bounds() -> None:
    m = SymmetricMatrix(2)
    with pytest.raises(IndexError):
        m[0, 2]
    with pytest.raises(IndexError):
        m[-1, 0] = 0.1


def test_single_item_is_one_zero() -> None:
    m = SymmetricMatrix(1)
    assert m.shape == (1, 1)
    assert np.asarray(m).tolist() == [[0.0]]


def test_from_dense_keeps_upper_triangle() -> None:
    dense = np.array([[0.0, 0.2, 0.4], [0.9, 0.0, 0.6], [0.9, 0.9, 0.0]])
    m = SymmetricMatrix.from_dense(dense)
    assert m.condensed.tolist() == [0.2, 0.4, 0.6]
    assert m[1, 0] == 0.2
    assert m == SymmetricMatrix(3, np.array([0.2, 0.4, 0.6]))


def test_rejects_wrong_condensed_length() -> None:
    with pytest.raises(ValueError):
        SymmetricMatrix(3, np.zeros(4))
    with pytest.raises(ValueError):
        SymmetricMatrix.from_dense(np.zeros((2, 3)))


def test_array_conversion_always_copies() -> None:
    m = SymmetricMatrix(3, np.array([0.2, 0.4, 0.6]))
    with pytest.raises(ValueError):
        m.__array__(copy=False)
    dense = np.asarray(m)
    dense[0, 1] = 0.9
    assert m[0, 1] == 0.2
    assert m.__array__(dtype=np.float32).dtype == np.float32
