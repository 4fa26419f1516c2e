"""
wavefront.py
────────────
Static split of the upper-triangle pairs {(i, j) : 0 ≤ i < j < n} into ``k``
worker buckets.

Pairs are emitted anti-diagonal by anti-diagonal, starting at the corner:

    d = n-1 :  (0, n-1)
    d = n-2 :  (0, n-2)  (1, n-1)
    d = n-3 :  (0, n-3)  (1, n-2)  (2, n-1)
    ...
    d = 1   :  (0, 1)    (1, 2)    ...       (n-2, n-1)

and dealt round-robin to buckets 0 … k-1.  The first pairs every bucket sees
touch rows 0 and n-1, whose sizes the engine computes before the workers
start; round-robin keeps all buckets within one pair of each other.

Example (n = 4, k = 2)
    emission : (0,3) (0,2) (1,3) (0,1) (1,2) (2,3)
    bucket 0 : (0,3) (1,3) (1,2)
    bucket 1 : (0,2) (0,1) (2,3)
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

from ..errors import InvalidInputError

Pair = Tuple[int, int]


def wavefront_pairs(n: int) -> Iterator[Pair]:
    """Yield every pair ``(i, j)``, ``i < j < n``, in anti-diagonal order."""
    for d in range(n - 1, 0, -1):
        for j in range(0, n - d):
            yield j, j + d


def wavefront_partition(n: int, k: int) -> Dict[int, List[Pair]]:
    """Round-robin the wavefront order of ``n`` items over ``k`` buckets.

    Every bucket id ``0 … k-1`` is present in the result; buckets are empty
    when there are fewer pairs than workers.
    """
    if n < 0:
        raise InvalidInputError("number of items must not be negative")
    if k < 1:
        raise InvalidInputError("number of buckets must be at least one")

    buckets: Dict[int, List[Pair]] = {b: [] for b in range(k)}
    for idx, pair in enumerate(wavefront_pairs(n)):
        buckets[idx % k].append(pair)
    return buckets


def bucket_loads(partition: Dict[int, List[Pair]]) -> List[int]:
    return [len(partition[b]) for b in sorted(partition)]
