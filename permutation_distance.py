from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from math import ceil, factorial
from typing import Dict, Sequence, Type
import numpy as np
from distance import (
    DIST_NAME_TO_ID,
    block_interchange,
    broken_edges,
    dist,
    edit_table,
    k_cycle,
    lex_rank,
    nontrivial_cycles,
    relabel,
    reversal_table,
    weighted_inv,
)
from errors import UnsupportedLengthError
from permutation import Permutation

log = logging.getLogger(__name__)


def _check_lengths(p1: Permutation, p2: Permutation) -> None:
    if len(p1) != len(p2):
        raise ValueError(f"Permutations must be the same length, got {len(p1)} and {len(p2)}")


class PermutationDistanceMeasurerDouble(ABC):
    """Anything that computes a real-valued distance between two permutations."""

    @abstractmethod
    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        ...


class PermutationDistanceMeasurer(PermutationDistanceMeasurerDouble):
    """Integer-valued distance; ``distancef`` is the same value as a float."""

    @abstractmethod
    def distance(self, p1: Permutation, p2: Permutation) -> int:
        ...

    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        return float(self.distance(p1, p2))


class NormalizedPermutationDistanceMeasurerDouble(PermutationDistanceMeasurerDouble):

    @abstractmethod
    def maxf(self, length: int) -> float:
        """Largest distance possible between permutations of ``length``."""

    def normalized_distance(self, p1: Permutation, p2: Permutation) -> float:
        m = self.maxf(len(p1))
        if m == 0:
            return 0.0
        return min(1.0, self.distancef(p1, p2) / m)


class NormalizedPermutationDistanceMeasurer(PermutationDistanceMeasurer, NormalizedPermutationDistanceMeasurerDouble):

    @abstractmethod
    def max(self, length: int) -> int:
        ...

    def maxf(self, length: int) -> float:
        return float(self.max(length))


class _RelabeledDistance(NormalizedPermutationDistanceMeasurer):
    # metrics that only depend on where p1 puts each element of p2
    dist_name = ""

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return int(dist(DIST_NAME_TO_ID[self.dist_name], relabel(np.asarray(p1), np.asarray(p2))))


class ExactMatchDistance(_RelabeledDistance):
    """Number of positions holding different elements."""

    dist_name = "Hamming"

    def max(self, length: int) -> int:
        return 0 if length <= 1 else length


class KendallTauDistance(_RelabeledDistance):
    """Number of element pairs in a different relative order (inversions of the relabeling)."""

    dist_name = "inv"

    def max(self, length: int) -> int:
        return 0 if length <= 1 else length * (length - 1) // 2


class DeviationDistance(_RelabeledDistance):
    """Sum over elements of the absolute difference of their positions."""

    dist_name = "L1"

    def max(self, length: int) -> int:
        return 0 if length <= 1 else (length * length - (length & 1)) // 2


class SquaredDeviationDistance(_RelabeledDistance):
    dist_name = "L2"

    def max(self, length: int) -> int:
        return 0 if length <= 1 else (length ** 3 - length) // 3


class LeeDistance(_RelabeledDistance):
    """Deviation distance with positions taken around a circle."""

    dist_name = "Lee"

    def max(self, length: int) -> int:
        return 0 if length <= 1 else length * (length >> 1)


class ReinsertionDistance(_RelabeledDistance):
    """Minimum number of remove-and-reinsert moves: n minus the longest common subsequence."""

    dist_name = "Ulam"

    def max(self, length: int) -> int:
        return 0 if length <= 1 else length - 1


class InterchangeDistance(_RelabeledDistance):
    """Minimum number of swaps: n minus the number of cycles of p1 composed with p2's inverse."""

    dist_name = "Cayley"

    def max(self, length: int) -> int:
        return 0 if length <= 1 else length - 1


class CycleDistance(InterchangeDistance):
    """n minus the number of cycles of p1 composed with p2's inverse, the same value as
    :class:`InterchangeDistance`. For the count of non-trivial cycles see
    :class:`CycleEditDistance` and :class:`KCycleDistance`.
    """


class DeviationDistanceNormalized(NormalizedPermutationDistanceMeasurerDouble):
    """Deviation distance divided by n-1."""

    def __init__(self):
        self._dev = DeviationDistance()

    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        _check_lengths(p1, p2)
        if len(p1) <= 1:
            return 0.0
        return self._dev.distance(p1, p2) / (len(p1) - 1)

    def maxf(self, length: int) -> float:
        if length <= 1:
            return 0.0
        return (length * length - (length & 1)) / (2.0 * (length - 1))


class DeviationDistanceNormalized2005(NormalizedPermutationDistanceMeasurerDouble):
    """Deviation distance divided by its maximum, so always in [0, 1]."""

    def __init__(self):
        self._dev = DeviationDistance()

    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        _check_lengths(p1, p2)
        n = len(p1)
        if n <= 1:
            return 0.0
        return self._dev.distance(p1, p2) * 2.0 / (n * n - (n & 1))

    def maxf(self, length: int) -> float:
        return 0.0 if length <= 1 else 1.0

    def normalized_distance(self, p1: Permutation, p2: Permutation) -> float:
        return self.distancef(p1, p2)


class CycleEditDistance(NormalizedPermutationDistanceMeasurer):
    """0 if equal, 1 if one cycle operation suffices, otherwise 2."""

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return min(2, int(nontrivial_cycles(relabel(np.asarray(p1), np.asarray(p2)))))

    def max(self, length: int) -> int:
        return 2 if length >= 4 else (1 if length >= 2 else 0)


class KCycleDistance(NormalizedPermutationDistanceMeasurer):
    """Minimum number of k-cycle operations (cycles of at most k elements) to turn p1 into p2."""

    def __init__(self, k: int):
        if k < 2:
            raise ValueError("k must be at least 2")
        self.k = k

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return int(k_cycle(relabel(np.asarray(p1), np.asarray(p2)), self.k))

    def max(self, length: int) -> int:
        return max(length >> 1, ceil((length - 1) / (self.k - 1)) if length > 1 else 0)


class ScrambleDistance(NormalizedPermutationDistanceMeasurer):

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return 0 if p1 == p2 else 1

    def max(self, length: int) -> int:
        return 0 if length <= 1 else 1


class BlockInterchangeDistance(NormalizedPermutationDistanceMeasurer):
    """Minimum number of exchanges of two non-overlapping blocks."""

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return int(block_interchange(np.asarray(p1), np.asarray(p2)))

    def max(self, length: int) -> int:
        return length >> 1


class RTypeDistance(NormalizedPermutationDistanceMeasurer):
    """Directed adjacencies of p1 missing from p2."""

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return int(broken_edges(np.asarray(p1), np.asarray(p2), False, True))

    def max(self, length: int) -> int:
        return 0 if length <= 1 else length - 1


class CyclicRTypeDistance(NormalizedPermutationDistanceMeasurer):
    """Directed adjacencies of p1 missing from p2, both read as cycles."""

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return int(broken_edges(np.asarray(p1), np.asarray(p2), True, True))

    def max(self, length: int) -> int:
        return 0 if length <= 2 else length


class AcyclicEdgeDistance(NormalizedPermutationDistanceMeasurer):
    """Undirected adjacencies of p1 missing from p2."""

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return int(broken_edges(np.asarray(p1), np.asarray(p2), False, False))

    def max(self, length: int) -> int:
        if length <= 2:
            return 0
        return 1 if length == 3 else length - 1


class CyclicEdgeDistance(NormalizedPermutationDistanceMeasurer):
    """Undirected adjacencies of p1 missing from p2, both read as cycles."""

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        return int(broken_edges(np.asarray(p1), np.asarray(p2), True, False))

    def max(self, length: int) -> int:
        if length <= 3:
            return 0
        return 2 if length == 4 else length


class ReversalDistance(NormalizedPermutationDistanceMeasurer):
    """Exact minimum number of segment reversals, for a single length ``n <= MAX_LENGTH``.

    Construction runs a breadth-first search over all n! permutations and
    keeps the distance of each from the identity, so it is only practical
    for small n. Distances are then a table lookup.
    """

    MAX_LENGTH = 10

    def __init__(self, n: int):
        if not 0 <= n <= self.MAX_LENGTH:
            raise UnsupportedLengthError(f"exact reversal distance supports 0 <= n <= {self.MAX_LENGTH}, got {n}")
        self._n = n
        log.info(f"Building reversal distance table for n={n} ({factorial(n)} permutations)")
        self._table = reversal_table(n)
        self._max = int(self._table.max())
        log.debug(f"Reversal distance table built, diameter {self._max}")

    def supported_length(self) -> int:
        return self._n

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        _check_lengths(p1, p2)
        if len(p1) != self._n:
            raise UnsupportedLengthError(f"configured for permutations of length {self._n} only")
        return int(self._table[lex_rank(relabel(np.asarray(p1), np.asarray(p2)))])

    def max(self, length: int) -> int:
        if length != self._n:
            raise UnsupportedLengthError(f"configured for permutations of length {self._n} only")
        return self._max


class WeightedKendallTauDistance(NormalizedPermutationDistanceMeasurerDouble):
    """Kendall tau distance where a discordant pair of elements a, b costs weights[a] * weights[b]."""

    def __init__(self, weights: Sequence[float]):
        self.weights = np.array(weights, dtype=np.float64)
        w = self.weights
        # sum over i < j of w[i] * w[j]
        self._max = float((w.sum() ** 2 - (w * w).sum()) / 2.0) if w.size > 1 else 0.0

    def supported_length(self) -> int:
        return self.weights.size

    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        n = self.weights.size
        if len(p1) != n or len(p2) != n:
            raise UnsupportedLengthError(f"weights support permutations of length {n} only")
        a2 = np.asarray(p2)
        return float(weighted_inv(relabel(np.asarray(p1), a2), self.weights[a2]))

    def maxf(self, length: int) -> float:
        return self._max


class EditDistance(PermutationDistanceMeasurerDouble):
    """Edit distance over the permutations read as sequences."""

    def __init__(self, insert_cost: float = 0.5, delete_cost: float = 0.5, change_cost: float = 1.0):
        if insert_cost < 0 or delete_cost < 0 or change_cost < 0:
            raise ValueError("Costs must be non-negative")
        self.insert_cost = float(insert_cost)
        self.delete_cost = float(delete_cost)
        self.change_cost = float(change_cost)

    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        _check_lengths(p1, p2)
        a1 = np.asarray(p1)
        a2 = np.asarray(p2)
        table = np.empty((a1.size + 1, a2.size + 1), np.float64)
        return float(edit_table(a1, a2, self.insert_cost, self.delete_cost, self.change_cost, table))


MEASURERS: Dict[str, Type[PermutationDistanceMeasurerDouble]] = {
    "exact_match": ExactMatchDistance,
    "hamming": ExactMatchDistance,
    "kendall_tau": KendallTauDistance,
    "weighted_kendall_tau": WeightedKendallTauDistance,
    "deviation": DeviationDistance,
    "deviation_normalized": DeviationDistanceNormalized,
    "deviation_normalized_2005": DeviationDistanceNormalized2005,
    "squared_deviation": SquaredDeviationDistance,
    "lee": LeeDistance,
    "reinsertion": ReinsertionDistance,
    "ulam": ReinsertionDistance,
    "interchange": InterchangeDistance,
    "cycle": CycleDistance,
    "cayley": CycleDistance,
    "cycle_edit": CycleEditDistance,
    "k_cycle": KCycleDistance,
    "scramble": ScrambleDistance,
    "block_interchange": BlockInterchangeDistance,
    "reversal": ReversalDistance,
    "r_type": RTypeDistance,
    "cyclic_r_type": CyclicRTypeDistance,
    "acyclic_edge": AcyclicEdgeDistance,
    "cyclic_edge": CyclicEdgeDistance,
    "edit": EditDistance,
}


def get_measurer(name: str, **kwargs) -> PermutationDistanceMeasurerDouble:
    """Instantiate a permutation distance measurer by name, e.g. ``get_measurer("k_cycle", k=3)``."""
    key = name.lower()
    if key not in MEASURERS:
        raise KeyError(f"unknown permutation distance {name!r}; known: {sorted(MEASURERS)}")
    log.debug(f"Using permutation distance {key} with {kwargs}")
    return MEASURERS[key](**kwargs)
