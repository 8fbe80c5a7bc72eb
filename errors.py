from __future__ import annotations


class IllegalPermutationStateError(RuntimeError):
    """Raised when a permutation's backing array is no longer a bijection on {0..n-1}."""


class UnsupportedLengthError(ValueError):
    """Raised when a metric is asked for a permutation length it cannot handle exactly."""
