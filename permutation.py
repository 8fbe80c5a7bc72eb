from __future__ import annotations
import operator
from typing import Callable, Iterator, Optional, Sequence, Union
import numpy as np
from errors import IllegalPermutationStateError
from rank import rank, unrank

# used by every randomized operation that is not handed a generator
DEFAULT_RNG = np.random.default_rng()

UnaryOperator = Callable[[np.ndarray], Optional[np.ndarray]]
BinaryOperator = Callable[[np.ndarray, np.ndarray], Optional[np.ndarray]]


def _check_index(i: int, n: int, name: str = "index") -> int:
    i = operator.index(i)
    if not 0 <= i < n:
        raise IndexError(f"{name} {i} out of range for permutation of length {n}")
    return i


def _as_permutation_array(p: Sequence[int]) -> np.ndarray:
    raw = np.asarray(p)
    if raw.size and not np.issubdtype(raw.dtype, np.integer):
        raise ValueError(f"Elements of p must be integers, got dtype {raw.dtype}")
    arr = np.array(raw, dtype=np.int64).reshape(-1)
    n = arr.size
    if n and (arr.min() < 0 or arr.max() >= n):
        raise ValueError("Elements of p must be in interval [0, len(p))")
    if np.bincount(arr, minlength=n).max(initial=0) > 1:
        raise ValueError("Duplicate elements of p are not allowed")
    return arr


def _is_bijection(arr: np.ndarray) -> bool:
    n = arr.size
    if n == 0:
        return True
    if arr.min() < 0 or arr.max() >= n:
        return False
    return bool(np.all(np.bincount(arr, minlength=n) == 1))


class Permutation:
    """A bijection on {0..n-1}, stored as an int64 array of values by position.

    ``Permutation(n)`` draws a uniformly random permutation of length ``n``,
    ``Permutation(seq)`` validates and copies an explicit array, and
    ``Permutation(other)`` copies another permutation. See also
    :meth:`identity`, :meth:`from_rank` and :meth:`random`.

    Instances are mutable and not safe for concurrent mutation; hand other
    threads a :meth:`copy`.
    """

    __slots__ = ("_perm",)

    def __init__(self, p: Union[int, Sequence[int], "Permutation"], rng: Optional[np.random.Generator] = None):
        if isinstance(p, Permutation):
            self._perm = p._perm.copy()
        elif isinstance(p, (int, np.integer)):
            if p < 0:
                raise ValueError("n must be non-negative")
            self._perm = np.arange(int(p), dtype=np.int64)
            self.scramble(rng)
        else:
            self._perm = _as_permutation_array(p)

    @classmethod
    def identity(cls, n: int) -> "Permutation":
        if n < 0:
            raise ValueError("n must be non-negative")
        return cls._wrap(np.arange(n, dtype=np.int64))

    @classmethod
    def random(cls, n: int, rng: Optional[np.random.Generator] = None) -> "Permutation":
        return cls(int(n), rng)

    @classmethod
    def from_rank(cls, n: int, r: int) -> "Permutation":
        """The permutation of length ``n`` whose lexicographic rank is ``r``."""
        return cls._wrap(unrank(n, r))

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "Permutation":
        p = cls.__new__(cls)
        p._perm = arr
        return p

    def copy(self) -> "Permutation":
        return Permutation._wrap(self._perm.copy())

    def restricted(self, length: int) -> "Permutation":
        """Elements smaller than ``length``, in the order they occur here."""
        if length >= self._perm.size:
            return self.copy()
        if length <= 0:
            return Permutation._wrap(np.empty(0, dtype=np.int64))
        return Permutation._wrap(self._perm[self._perm < length].copy())

    # ---- access ----

    def __len__(self) -> int:
        return self._perm.size

    def get(self, i: int) -> int:
        return int(self._perm[_check_index(i, self._perm.size)])

    __getitem__ = get

    def get_range(self, i: int, j: int) -> np.ndarray:
        """Copy of the values at positions i..j inclusive."""
        n = self._perm.size
        _check_index(i, n, "i")
        _check_index(j, n, "j")
        if j < i:
            raise ValueError("j must not be less than i")
        return self._perm[i:j + 1].copy()

    def to_array(self) -> np.ndarray:
        return self._perm.copy()

    def __array__(self, dtype=None, copy=None):
        if copy or (dtype is not None and np.dtype(dtype) != self._perm.dtype):
            return np.array(self._perm, dtype=dtype)
        view = self._perm.view()
        view.flags.writeable = False
        return view

    def __iter__(self) -> Iterator[int]:
        return iter(self._perm.tolist())

    def get_inverse(self) -> np.ndarray:
        inverse = np.empty_like(self._perm)
        inverse[self._perm] = np.arange(self._perm.size, dtype=np.int64)
        return inverse

    def inverse(self) -> "Permutation":
        return Permutation._wrap(self.get_inverse())

    def to_integer(self) -> int:
        """Lexicographic rank in [0, n!), exact for any length."""
        return rank(self._perm)

    # ---- mutation ----

    def set(self, p: Sequence[int]) -> None:
        arr = _as_permutation_array(p)
        if arr.size != self._perm.size:
            raise ValueError("Length of array must be same as that of permutation")
        self._perm[:] = arr

    def invert(self) -> None:
        self._perm[:] = self.get_inverse()

    def swap(self, i: int, j: int) -> None:
        n = self._perm.size
        i = _check_index(i, n, "i")
        j = _check_index(j, n, "j")
        p = self._perm
        p[i], p[j] = p[j], p[i]

    def swap_blocks(self, a: int, b: int, i: int, j: int) -> None:
        """Exchange block a..b with block i..j (inclusive), requiring a <= b < i <= j."""
        n = self._perm.size
        for name, x in (("a", a), ("b", b), ("i", i), ("j", j)):
            _check_index(x, n, name)
        if b < a or i <= b or j < i:
            raise ValueError("Illegal block definition: blocks must be ordered and non-overlapping")
        p = self._perm
        if a == b and i == j:
            p[a], p[i] = p[i], p[a]
        else:
            p[a:j + 1] = np.concatenate((p[i:j + 1], p[b + 1:i], p[a:b + 1]))

    def reverse(self, i: Optional[int] = None, j: Optional[int] = None) -> None:
        """Reverse the whole permutation, or positions i..j inclusive in either order."""
        if i is None and j is None:
            self._perm[:] = self._perm[::-1].copy()
            return
        if i is None or j is None:
            raise ValueError("reverse needs both endpoints or neither")
        n = self._perm.size
        i = _check_index(i, n, "i")
        j = _check_index(j, n, "j")
        if i > j:
            i, j = j, i
        self._perm[i:j + 1] = self._perm[i:j + 1][::-1].copy()

    def rotate(self, k: int) -> None:
        """Rotate left so that the value at position k moves to position 0."""
        n = self._perm.size
        if n == 0:
            return
        k %= n
        if k:
            self._perm[:] = np.roll(self._perm, -k)

    def remove_and_insert(self, i: int, j: int, size: int = 1) -> None:
        """Move the block of ``size`` values starting at i so it starts at j."""
        n = self._perm.size
        i = _check_index(i, n, "i")
        j = _check_index(j, n, "j")
        if size < 0 or i + size > n or j + size > n:
            raise IndexError(f"block of size {size} does not fit in permutation of length {n}")
        if size == 0 or i == j:
            return
        p = self._perm
        block = p[i:i + size].copy()
        if i < j:
            p[i:j] = p[i + size:j + size].copy()
        else:
            p[j + size:i + size] = p[j:i].copy()
        p[j:j + size] = block

    def cycle(self, indexes: Sequence) -> None:
        """Rotate values among positions: each position takes the value of the next one listed.

        ``indexes`` is one cycle (a sequence of positions) or a sequence of
        such cycles, which must be pairwise disjoint.
        """
        if len(indexes) and np.ndim(indexes[0]) > 0:
            cycles = [np.asarray(c, dtype=np.int64).reshape(-1) for c in indexes]
        else:
            cycles = [np.asarray(indexes, dtype=np.int64).reshape(-1)]
        n = self._perm.size
        flat = np.concatenate(cycles)
        if flat.size and (flat.min() < 0 or flat.max() >= n):
            raise IllegalPermutationStateError("cycle positions must be in [0, n)")
        if np.unique(flat).size != flat.size:
            raise IllegalPermutationStateError("cycle positions must be distinct and cycles disjoint")
        p = self._perm
        for c in cycles:
            if c.size > 1:
                p[c] = np.roll(p[c], -1)

    def scramble(self, rng: Optional[np.random.Generator] = None, guarantee_different: bool = False) -> None:
        """Uniformly shuffle in place; ``guarantee_different`` forces a change for n >= 2."""
        rng = DEFAULT_RNG if rng is None else rng
        n = self._perm.size
        if not guarantee_different:
            rng.shuffle(self._perm)
            return
        changed = False
        for i in range(n - 1, 1, -1):
            j = int(rng.integers(i + 1))
            if i != j:
                self._swap_unchecked(i, j)
                changed = True
        if n > 1 and (not changed or rng.integers(2)):
            self._swap_unchecked(0, 1)

    def scramble_range(self, i: int, j: int, rng: Optional[np.random.Generator] = None) -> None:
        """Shuffle positions i..j inclusive, always changing them when i != j."""
        n = self._perm.size
        i = _check_index(i, n, "i")
        j = _check_index(j, n, "j")
        if i == j:
            return
        if i > j:
            i, j = j, i
        self.scramble_indexes(range(i, j + 1), rng)

    def scramble_indexes(self, indexes: Sequence[int], rng: Optional[np.random.Generator] = None) -> None:
        """Shuffle the values at an arbitrary set of positions, always changing them."""
        rng = DEFAULT_RNG if rng is None else rng
        idx = [_check_index(x, self._perm.size) for x in indexes]
        if len(idx) < 2:
            return
        changed = False
        for k in range(len(idx) - 1, 1, -1):
            m = int(rng.integers(k + 1))
            if m != k:
                self._swap_unchecked(idx[m], idx[k])
                changed = True
        if not changed or rng.integers(2):
            self._swap_unchecked(idx[0], idx[1])

    def _swap_unchecked(self, i: int, j: int) -> None:
        p = self._perm
        p[i], p[j] = p[j], p[i]

    # ---- functional application ----

    def apply(self, op: Union[UnaryOperator, BinaryOperator], other: Optional["Permutation"] = None) -> None:
        """Replace contents with ``op(values)`` or ``op(values, other_values)``.

        ``op`` receives copies and may either return the new array or edit
        its first argument in place and return None. The result is not
        checked; see :meth:`apply_then_validate`.
        """
        work = self._perm.copy()
        if other is None:
            result = op(work)
        else:
            result = op(work, other._perm.copy())
        self._store(work if result is None else result)

    def apply_full(self, op: Callable, other: Optional["Permutation"] = None) -> None:
        """Like :meth:`apply`, but ``op`` also receives the Permutation objects."""
        work = self._perm.copy()
        if other is None:
            result = op(work, self)
        else:
            result = op(work, other._perm.copy(), self, other)
        self._store(work if result is None else result)

    def apply_then_validate(self, op: Union[UnaryOperator, BinaryOperator], other: Optional["Permutation"] = None) -> None:
        self.apply(op, other)
        self._validate()

    def apply_full_then_validate(self, op: Callable, other: Optional["Permutation"] = None) -> None:
        self.apply_full(op, other)
        self._validate()

    def _store(self, arr) -> None:
        arr = np.asarray(arr)
        if arr.shape != self._perm.shape:
            raise ValueError(f"operator produced shape {arr.shape}, expected {self._perm.shape}")
        if arr.size and not np.issubdtype(arr.dtype, np.integer):
            raise IllegalPermutationStateError(f"operator produced non-integer dtype {arr.dtype}")
        self._perm[:] = arr

    def _validate(self) -> None:
        if not _is_bijection(self._perm):
            raise IllegalPermutationStateError("operator left the permutation in an illegal state")

    # ---- value semantics ----

    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if not isinstance(other, Permutation):
            return NotImplemented
        return self._perm.size == other._perm.size and bool(np.array_equal(self._perm, other._perm))

    def __hash__(self) -> int:
        return hash(tuple(self._perm.tolist()))

    def __str__(self) -> str:
        return " ".join(str(v) for v in self._perm.tolist())

    def __repr__(self) -> str:
        return f"Permutation({self._perm.tolist()})"


def iter_permutations(start: Union[int, Permutation]) -> Iterator[Permutation]:
    """Yield all n! permutations of a length, each as an independent copy.

    Given an int, starts from the identity; given a Permutation, starts
    from a copy of it.
    """
    p = Permutation.identity(start) if isinstance(start, (int, np.integer)) else start.copy()
    n = len(p)
    last_swap = list(range(n))
    while True:
        yield p.copy()
        if n <= 1:
            return
        for i in range(n - 2, -1, -1):
            if last_swap[i] != i:
                p._swap_unchecked(i, last_swap[i])
            if last_swap[i] == n - 1:
                last_swap[i] = i
                if i == 0:
                    return
                continue
            last_swap[i] += 1
            p._swap_unchecked(i, last_swap[i])
            break
