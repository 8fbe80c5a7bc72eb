from itertools import product
import numpy as np
import pytest
import permutation_distance as pd
from errors import UnsupportedLengthError
from permutation import Permutation, iter_permutations


def perm(*values):
    return Permutation(list(values))


def integer_measurers(n):
    return [
        pd.ExactMatchDistance(),
        pd.KendallTauDistance(),
        pd.DeviationDistance(),
        pd.SquaredDeviationDistance(),
        pd.LeeDistance(),
        pd.ReinsertionDistance(),
        pd.InterchangeDistance(),
        pd.CycleDistance(),
        pd.CycleEditDistance(),
        pd.KCycleDistance(2),
        pd.KCycleDistance(3),
        pd.ScrambleDistance(),
        pd.BlockInterchangeDistance(),
        pd.RTypeDistance(),
        pd.CyclicRTypeDistance(),
        pd.AcyclicEdgeDistance(),
        pd.CyclicEdgeDistance(),
        pd.ReversalDistance(n),
    ]


# measures that can be zero for distinct permutations
NOT_POSITIVE = (pd.CyclicRTypeDistance, pd.AcyclicEdgeDistance, pd.CyclicEdgeDistance)


@pytest.mark.parametrize("n", [4, 5])
def test_exhaustive_metric_properties(n):
    everything = list(iter_permutations(n))
    identity = Permutation.identity(n)
    for d in integer_measurers(n):
        m = d.max(n)
        largest = 0
        for q in everything:
            value = d.distance(identity, q)
            assert isinstance(value, int)
            assert 0 <= value <= m, type(d).__name__
            largest = max(largest, value)
            if q != identity and not isinstance(d, NOT_POSITIVE):
                assert value > 0, type(d).__name__
        assert largest == m, type(d).__name__


def test_symmetry_and_identity_on_all_pairs():
    everything = list(iter_permutations(4))
    for d in integer_measurers(4):
        for p1, p2 in product(everything, repeat=2):
            assert d.distance(p1, p2) == d.distance(p2, p1), type(d).__name__
        for p in everything:
            assert d.distance(p, p) == 0


def test_value_relabeling_does_not_change_distance():
    rng = np.random.default_rng(9)
    measurers = integer_measurers(7)
    for _ in range(20):
        p1 = Permutation.random(7, rng)
        p2 = Permutation.random(7, rng)
        sigma = Permutation.random(7, rng).to_array()
        q1 = Permutation(sigma[p1.to_array()])
        q2 = Permutation(sigma[p2.to_array()])
        for d in measurers:
            assert d.distance(p1, p2) == d.distance(q1, q2), type(d).__name__


def test_known_values():
    ident4 = Permutation.identity(4)
    rev4 = perm(3, 2, 1, 0)
    rot4 = perm(1, 2, 3, 0)
    assert pd.KendallTauDistance().distance(ident4, rev4) == 6
    assert pd.DeviationDistance().distance(ident4, rev4) == 8
    assert pd.DeviationDistance().distance(ident4, rot4) == 6
    assert pd.LeeDistance().distance(ident4, rot4) == 4
    assert pd.ReinsertionDistance().distance(ident4, rot4) == 1
    assert pd.SquaredDeviationDistance().distance(ident4, rot4) == 12
    assert pd.ExactMatchDistance().distance(ident4, perm(0, 2, 1, 3)) == 2
    assert pd.CycleDistance().distance(Permutation.identity(6), perm(1, 2, 0, 4, 3, 5)) == 3
    assert pd.InterchangeDistance().distance(Permutation.identity(6), perm(1, 2, 0, 4, 3, 5)) == 3


def test_cycle_measures():
    ident4 = Permutation.identity(4)
    three_cycle = perm(1, 2, 0, 3)
    assert pd.KCycleDistance(3).distance(ident4, three_cycle) == 1
    assert pd.KCycleDistance(2).distance(ident4, three_cycle) == 2
    assert pd.KCycleDistance(3).distance(Permutation.identity(5), perm(1, 2, 3, 4, 0)) == 2
    assert pd.CycleEditDistance().distance(ident4, perm(1, 0, 3, 2)) == 2
    assert pd.CycleEditDistance().distance(ident4, three_cycle) == 1
    with pytest.raises(ValueError):
        pd.KCycleDistance(1)


def test_edge_measures():
    ident4 = Permutation.identity(4)
    rev4 = perm(3, 2, 1, 0)
    rot4 = perm(1, 2, 3, 0)
    assert pd.RTypeDistance().distance(ident4, rev4) == 3
    assert pd.RTypeDistance().distance(ident4, rot4) == 1
    assert pd.CyclicRTypeDistance().distance(ident4, rot4) == 0
    assert pd.AcyclicEdgeDistance().distance(ident4, rev4) == 0
    assert pd.CyclicEdgeDistance().distance(ident4, rot4) == 0


def test_scramble_and_block_interchange():
    ident = Permutation.identity(6)
    assert pd.ScrambleDistance().distance(ident, ident.copy()) == 0
    assert pd.ScrambleDistance().distance(ident, perm(1, 0, 2, 3, 4, 5)) == 1
    moved = ident.copy()
    moved.swap_blocks(0, 1, 3, 5)
    assert pd.BlockInterchangeDistance().distance(ident, moved) == 1


def test_reversal_distance():
    d = pd.ReversalDistance(5)
    ident = Permutation.identity(5)
    assert d.supported_length() == 5
    assert d.distance(ident, perm(0, 3, 2, 1, 4)) == 1
    assert d.distance(ident, perm(1, 0, 3, 2, 4)) == 2
    assert d.distance(ident, perm(4, 3, 2, 1, 0)) == 1
    assert d.max(5) == 4
    with pytest.raises(UnsupportedLengthError):
        d.distance(Permutation.identity(4), Permutation.identity(4))
    with pytest.raises(UnsupportedLengthError):
        d.max(6)


def test_reversal_distance_length_bounds():
    with pytest.raises(UnsupportedLengthError):
        pd.ReversalDistance(pd.ReversalDistance.MAX_LENGTH + 1)
    with pytest.raises(ValueError):
        pd.ReversalDistance(-1)
    assert pd.ReversalDistance(0).distance(Permutation.identity(0), Permutation.identity(0)) == 0


def test_weighted_kendall_tau():
    d = pd.WeightedKendallTauDistance([1, 2, 3, 4])
    ident = Permutation.identity(4)
    assert d.supported_length() == 4
    assert d.distancef(ident, perm(1, 0, 2, 3)) == pytest.approx(2.0)
    assert d.distancef(ident, perm(3, 2, 1, 0)) == pytest.approx(35.0)
    assert d.maxf(4) == pytest.approx(35.0)
    assert d.normalized_distance(ident, perm(3, 2, 1, 0)) == pytest.approx(1.0)
    # weights belong to elements, not positions
    assert d.distancef(perm(2, 3, 0, 1), perm(3, 2, 0, 1)) == pytest.approx(12.0)
    with pytest.raises(UnsupportedLengthError):
        d.distancef(Permutation.identity(5), Permutation.identity(5))


def test_weighted_kendall_tau_with_unit_weights_is_kendall_tau():
    rng = np.random.default_rng(2)
    d = pd.WeightedKendallTauDistance(np.ones(8))
    kt = pd.KendallTauDistance()
    for _ in range(20):
        p1 = Permutation.random(8, rng)
        p2 = Permutation.random(8, rng)
        assert d.distancef(p1, p2) == pytest.approx(kt.distance(p1, p2))


def test_normalized_deviation_variants():
    ident = Permutation.identity(4)
    rev = perm(3, 2, 1, 0)
    dn = pd.DeviationDistanceNormalized()
    assert dn.distancef(ident, rev) == pytest.approx(8 / 3)
    assert dn.maxf(4) == pytest.approx(8 / 3)
    assert dn.normalized_distance(ident, rev) == pytest.approx(1.0)
    d2005 = pd.DeviationDistanceNormalized2005()
    assert d2005.distancef(ident, rev) == pytest.approx(1.0)
    assert d2005.distancef(ident, perm(1, 2, 3, 0)) == pytest.approx(0.75)
    assert d2005.distancef(Permutation.identity(1), Permutation.identity(1)) == 0.0


def test_normalized_distance_range():
    rng = np.random.default_rng(4)
    for d in integer_measurers(6):
        for _ in range(10):
            p1 = Permutation.random(6, rng)
            p2 = Permutation.random(6, rng)
            value = d.normalized_distance(p1, p2)
            assert 0.0 <= value <= 1.0
            assert d.distancef(p1, p2) == float(d.distance(p1, p2))
    assert pd.ExactMatchDistance().normalized_distance(Permutation.identity(1), Permutation.identity(1)) == 0.0


def test_edit_distance_on_permutations():
    ident = Permutation.identity(3)
    swapped = perm(1, 0, 2)
    assert pd.EditDistance().distancef(ident, swapped) == pytest.approx(1.0)
    assert pd.EditDistance(1, 1, 1).distancef(ident, swapped) == pytest.approx(2.0)
    assert pd.EditDistance().distancef(ident, ident) == 0.0
    with pytest.raises(ValueError):
        pd.EditDistance().distancef(Permutation.identity(3), Permutation.identity(4))
    with pytest.raises(ValueError):
        pd.EditDistance(-1, 1, 1)


def test_length_mismatch_rejected():
    for d in integer_measurers(4):
        with pytest.raises(ValueError):
            d.distance(Permutation.identity(4), Permutation.identity(5))


def test_get_measurer():
    assert isinstance(pd.get_measurer("Kendall_Tau"), pd.KendallTauDistance)
    assert isinstance(pd.get_measurer("cayley"), pd.CycleDistance)
    k = pd.get_measurer("k_cycle", k=3)
    assert isinstance(k, pd.KCycleDistance) and k.k == 3
    r = pd.get_measurer("reversal", n=4)
    assert r.supported_length() == 4
    with pytest.raises(KeyError):
        pd.get_measurer("no_such_distance")


def test_reversal_table_build_is_logged(caplog):
    with caplog.at_level("INFO", logger="permutation_distance"):
        pd.ReversalDistance(3)
    assert "n=3 (6 permutations)" in caplog.text


def test_weighted_kendall_tau_symmetric_up_to_rounding():
    rng = np.random.default_rng(30)
    d = pd.WeightedKendallTauDistance(rng.random(30))
    for _ in range(20):
        p1 = Permutation.random(30, rng)
        p2 = Permutation.random(30, rng)
        assert d.distancef(p1, p2) == pytest.approx(d.distancef(p2, p1))
