from __future__ import annotations
from math import factorial
import numpy as np
import numba as nb


@nb.njit(cache=True, fastmath=True)
def lehmer(perm):
    # count of smaller values to the right of each position
    n = perm.size
    code = np.zeros(n, np.int64)
    bit = np.zeros(n + 1, np.int64)
    for k in range(n - 1, -1, -1):
        x = int(perm[k])
        s = 0
        i = x
        while i:
            s += bit[i]
            i &= i - 1
        code[k] = s
        i = x + 1
        while i <= n:
            bit[i] += 1
            i += i & -i
    return code


def rank(perm: np.ndarray) -> int:
    """Lexicographic rank of ``perm`` among all permutations of its length.

    Composes the Lehmer code in the factorial number system,
    ``rank = sum(code[i] * (n-1-i)!)``, with Python integers so the
    result is exact for any length.
    """
    n = perm.size
    r = 0
    for i, d in enumerate(lehmer(perm).tolist()):
        r = r * (n - i) + d
    return r


def unrank(n: int, r: int) -> np.ndarray:
    """Inverse of :func:`rank`: the permutation of length ``n`` with rank ``r``."""
    if n < 0:
        raise ValueError("n must be non-negative")
    if not 0 <= r < factorial(n):
        raise ValueError(f"rank must be in [0, {n}!), got {r}")
    digits = [0] * n
    for i in range(n - 1, -1, -1):
        r, digits[i] = divmod(r, n - i)
    pool = list(range(n))
    return np.array([pool.pop(d) for d in digits], dtype=np.int64)
