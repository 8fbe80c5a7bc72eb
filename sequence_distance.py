from __future__ import annotations
from abc import ABC, abstractmethod
from bisect import bisect_left
from numbers import Integral, Real
from typing import Any, Dict, List, Sequence, Tuple
import numpy as np
from distance import edit_table, inv, lcs_len


def _labels(s1: Sequence, s2: Sequence) -> Tuple[np.ndarray, np.ndarray]:
    """Integer codes for the elements of both sequences; equal elements share a code."""
    try:
        table: Dict[Any, int] = {}
        a = np.fromiter((table.setdefault(e, len(table)) for e in s1), np.int64, len(s1))
        b = np.fromiter((table.setdefault(e, len(table)) for e in s2), np.int64, len(s2))
        return a, b
    except TypeError:
        return _labels_by_equality(s1, s2)


def _labels_by_equality(s1: Sequence, s2: Sequence) -> Tuple[np.ndarray, np.ndarray]:
    # unhashable elements: linear search over the distinct elements seen so far
    seen: List[Any] = []

    def code(e):
        for k, x in enumerate(seen):
            if x == e:
                return k
        seen.append(e)
        return len(seen) - 1

    a = np.array([code(e) for e in s1], dtype=np.int64)
    b = np.array([code(e) for e in s2], dtype=np.int64)
    return a, b


class SequenceDistanceMeasurerDouble(ABC):
    """Anything that computes a real-valued distance between two sequences."""

    @abstractmethod
    def distancef(self, s1: Sequence, s2: Sequence) -> float:
        ...


class SequenceDistanceMeasurer(SequenceDistanceMeasurerDouble):

    @abstractmethod
    def distance(self, s1: Sequence, s2: Sequence) -> int:
        ...

    def distancef(self, s1: Sequence, s2: Sequence) -> float:
        return float(self.distance(s1, s2))


class ExactMatchDistance(SequenceDistanceMeasurer):
    """Mismatched positions, counting every position of the longer sequence without a counterpart."""

    def distance(self, s1: Sequence, s2: Sequence) -> int:
        n = min(len(s1), len(s2))
        cost = max(len(s1), len(s2))
        for i in range(n):
            if s1[i] == s2[i]:
                cost -= 1
        return cost


class EditDistance(SequenceDistanceMeasurer):
    """Generalized Levenshtein distance with separate insertion, deletion and change costs.

    Integer costs give an exact integer ``distance``; with non-integral
    costs only ``distancef`` is available and ``distance`` raises ValueError.
    """

    def __init__(self, insert_cost: Real = 1, delete_cost: Real = 1, change_cost: Real = 1):
        costs = (insert_cost, delete_cost, change_cost)
        if any(c < 0 for c in costs):
            raise ValueError("Costs must be non-negative")
        self.insert_cost, self.delete_cost, self.change_cost = costs
        self._integral = all(isinstance(c, Integral) or float(c).is_integer() for c in costs)

    def distance(self, s1: Sequence, s2: Sequence) -> int:
        if not self._integral:
            raise ValueError("distance requires integer costs; use distancef")
        a, b = _labels(s1, s2)
        table = np.empty((a.size + 1, b.size + 1), np.int64)
        return int(edit_table(a, b, int(self.insert_cost), int(self.delete_cost), int(self.change_cost), table))

    def distancef(self, s1: Sequence, s2: Sequence) -> float:
        a, b = _labels(s1, s2)
        table = np.empty((a.size + 1, b.size + 1), np.float64)
        return float(edit_table(a, b, float(self.insert_cost), float(self.delete_cost), float(self.change_cost), table))


class LongestCommonSubsequenceDistance(SequenceDistanceMeasurer):
    """len(s1) + len(s2) - 2 * LCS(s1, s2)."""

    def distance(self, s1: Sequence, s2: Sequence) -> int:
        a, b = _labels(s1, s2)
        return a.size + b.size - 2 * int(lcs_len(a, b))


class KendallTauSequenceDistance(SequenceDistanceMeasurer):
    """Discordant pairs between two orderings of the same multiset of elements.

    The k-th occurrence of an element in ``s1`` is matched with its k-th
    occurrence in ``s2``, so equal elements never form a discordant pair.
    Elements are relabeled by hashing, or, with ``use_alternate_alg``, by
    sorting, which needs a total order on the elements but not hashability.
    Both give the same result.
    """

    def __init__(self, use_alternate_alg: bool = False):
        self.use_alternate_alg = use_alternate_alg

    def distance(self, s1: Sequence, s2: Sequence) -> int:
        if len(s1) != len(s2):
            raise ValueError("Sequences must be same length for Kendall Tau distance")
        if len(s1) == 0:
            return 0
        if self.use_alternate_alg:
            a, b, k = self._relabel_by_sorting(s1, s2)
        else:
            a, b, k = self._relabel_by_hashing(s1, s2)
        if not np.array_equal(np.bincount(a, minlength=k), np.bincount(b, minlength=k)):
            raise ValueError("Sequences must contain same elements")
        # position in s2 of the matching occurrence of each element of s1
        mapping = np.empty(a.size, np.int64)
        mapping[np.argsort(a, kind="stable")] = np.argsort(b, kind="stable")
        return int(inv(mapping))

    @staticmethod
    def _relabel_by_hashing(s1: Sequence, s2: Sequence) -> Tuple[np.ndarray, np.ndarray, int]:
        table: Dict[Any, int] = {}
        for e in s1:
            table.setdefault(e, len(table))
        a = np.fromiter((table[e] for e in s1), np.int64, len(s1))
        try:
            b = np.fromiter((table[e] for e in s2), np.int64, len(s2))
        except KeyError:
            raise ValueError("Sequences must contain same elements: s2 contains at least one element not in s1") from None
        return a, b, len(table)

    @staticmethod
    def _relabel_by_sorting(s1: Sequence, s2: Sequence) -> Tuple[np.ndarray, np.ndarray, int]:
        distinct: List[Any] = []
        for e in sorted(s1):
            if not distinct or distinct[-1] != e:
                distinct.append(e)

        def label(e):
            k = bisect_left(distinct, e)
            if k == len(distinct) or distinct[k] != e:
                raise ValueError("Sequences must contain same elements: s2 contains at least one element not in s1")
            return k

        a = np.array([label(e) for e in s1], dtype=np.int64)
        b = np.array([label(e) for e in s2], dtype=np.int64)
        return a, b, len(distinct)
