from __future__ import annotations
from typing import Callable, Iterator, TypeVar
from permutation import Permutation
from permutation_distance import PermutationDistanceMeasurer, PermutationDistanceMeasurerDouble

T = TypeVar("T", int, float)


def _orbit(p: Permutation, rotations: bool, reversal: bool) -> Iterator[Permutation]:
    # every image of p under the group except p itself
    bases = [p]
    if reversal:
        r = p.copy()
        r.reverse()
        bases.append(r)
    for k, base in enumerate(bases):
        if k:
            yield base
        if rotations:
            q = base.copy()
            for _ in range(1, len(q)):
                q.rotate(1)
                yield q.copy()


def _min_over_orbit(measure: Callable[[Permutation, Permutation], T], p1: Permutation, p2: Permutation,
                    rotations: bool, reversal: bool) -> T:
    result = measure(p1, p2)
    for q in _orbit(p2, rotations, reversal):
        if result == 0:
            break
        result = min(result, measure(p1, q))
    return result


class CyclicIndependentDistance(PermutationDistanceMeasurer):
    """Minimum of the wrapped distance over all rotations of the second permutation."""

    def __init__(self, d: PermutationDistanceMeasurer):
        self.d = d

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        return _min_over_orbit(self.d.distance, p1, p2, True, False)


class ReversalIndependentDistance(PermutationDistanceMeasurer):
    """Minimum of the wrapped distance over the second permutation and its reversal."""

    def __init__(self, d: PermutationDistanceMeasurer):
        self.d = d

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        return _min_over_orbit(self.d.distance, p1, p2, False, True)


class CyclicReversalIndependentDistance(PermutationDistanceMeasurer):
    """Minimum over every rotation of the second permutation and of its reversal."""

    def __init__(self, d: PermutationDistanceMeasurer):
        self.d = d

    def distance(self, p1: Permutation, p2: Permutation) -> int:
        return _min_over_orbit(self.d.distance, p1, p2, True, True)


class CyclicIndependentDistanceDouble(PermutationDistanceMeasurerDouble):

    def __init__(self, d: PermutationDistanceMeasurerDouble):
        self.d = d

    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        return _min_over_orbit(self.d.distancef, p1, p2, True, False)


class ReversalIndependentDistanceDouble(PermutationDistanceMeasurerDouble):

    def __init__(self, d: PermutationDistanceMeasurerDouble):
        self.d = d

    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        return _min_over_orbit(self.d.distancef, p1, p2, False, True)


class CyclicReversalIndependentDistanceDouble(PermutationDistanceMeasurerDouble):

    def __init__(self, d: PermutationDistanceMeasurerDouble):
        self.d = d

    def distancef(self, p1: Permutation, p2: Permutation) -> float:
        return _min_over_orbit(self.d.distancef, p1, p2, True, True)
