"""
Error types raised by manifold_kf.

Both filter error kinds are fail-fast: they are raised to the immediate caller
before (DimensionMismatch) or instead of (NumericalFailure) any state mutation.
"""

import numpy as np


class DimensionMismatch(ValueError):
    """An input vector or matrix does not have the required fixed size."""


class NumericalFailure(np.linalg.LinAlgError):
    """
    A symmetric positive-definite factorization failed.

    Signals an already-corrupted covariance. The filter does not recover on
    its own; reinitialization is up to the caller.
    """


class MissingParameterError(KeyError):
    """A required configuration parameter could not be retrieved."""
