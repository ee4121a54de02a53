"""Numerical utilities for scalar observation models and decoding.

Provides univariate normal densities, negative-log helpers and input
coercion shared by the Gaussian mixture and the Viterbi decoder. All helpers
work in numpy float64 so degenerate inputs (zero variance, zero probability)
produce NaN or infinity instead of raising.
"""

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

_LOG_2PI = np.log(2.0 * np.pi)


def normal_pdf(x, mean, variance) -> np.ndarray:
    """Compute the univariate normal density.

    Broadcasts over ``x``, ``mean`` and ``variance``. A zero variance is not
    rejected: the result is NaN.

    Args:
        x: Observation value(s).
        mean: Mean(s).
        variance: Variance(s).

    Returns:
        Density value(s), same broadcast shape as the inputs.

    Examples:
        >>> float(normal_pdf(0.0, 0.0, 1.0))
        0.3989422804014327
    """
    x = np.asarray(x, dtype=np.float64)
    mean = np.asarray(mean, dtype=np.float64)
    variance = np.asarray(variance, dtype=np.float64)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        diff = x - mean
        return np.exp(-0.5 * diff * diff / variance) / np.sqrt(2.0 * np.pi * variance)


def log_normal_pdf(x, mean, variance) -> np.ndarray:
    """Compute the univariate normal log-density.

    Args:
        x: Observation value(s).
        mean: Mean(s).
        variance: Variance(s).

    Returns:
        Log-density value(s).

    Examples:
        >>> float(log_normal_pdf(0.0, 0.0, 1.0))
        -0.9189385332046727
    """
    x = np.asarray(x, dtype=np.float64)
    mean = np.asarray(mean, dtype=np.float64)
    variance = np.asarray(variance, dtype=np.float64)

    with np.errstate(divide="ignore", invalid="ignore"):
        diff = x - mean
        return -0.5 * (_LOG_2PI + np.log(variance) + diff * diff / variance)


def neg_log(p) -> np.float64:
    """Negative natural logarithm in numpy float64.

    ``neg_log(0.0)`` is ``+inf`` and ``neg_log(nan)`` is NaN; neither raises.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return -np.log(np.float64(p))


def observation_values(observations: Iterable) -> np.ndarray:
    """Convert a collection of observations to a 1D float64 array.

    Accepts :class:`~hmmkit.probabilistic.observation.ScalarObservation`
    instances, plain numbers, or a numpy array.

    Raises:
        ValueError: If the values do not form a 1D sequence.
    """
    if isinstance(observations, np.ndarray):
        values = observations.astype(np.float64, copy=True)
    else:
        values = np.array([float(o) for o in observations], dtype=np.float64)
    return ensure_1d(values)


def uniform_weights(n: int) -> np.ndarray:
    """Weights of ``1/n`` each."""
    return np.full(n, 1.0 / n)


def normalize_proportions(proportions, n: Optional[int] = None) -> np.ndarray:
    """Validate and normalize mixing proportions.

    Args:
        proportions: Non-negative values with a strictly positive sum.
        n: Expected length, if known.

    Returns:
        Float64 array summing to 1.

    Raises:
        ValueError: If the length is wrong, any value is negative or not
            finite, or the sum is not strictly positive.
    """
    proportions = ensure_1d(np.asarray(proportions, dtype=np.float64))
    if n is not None and proportions.shape != (n,):
        raise ValueError(f"proportions shape {proportions.shape} != ({n},)")
    if not np.all(np.isfinite(proportions)):
        raise ValueError("proportions must be finite")
    if np.any(proportions < 0):
        raise ValueError("proportions must be non-negative")
    total = np.sum(proportions)
    if not total > 0:
        raise ValueError("proportions must have a strictly positive sum")
    return proportions / total


def ensure_1d(x: np.ndarray) -> np.ndarray:
    """Ensure array is 1D, raising error if not.

    Args:
        x: Input array.

    Returns:
        1D array (scalars become length-1 arrays).

    Raises:
        ValueError: If the array has more than one dimension.
    """
    x = np.asarray(x)
    if x.ndim == 0:
        return x.reshape(1)
    if x.ndim > 1:
        raise ValueError(f"Expected 1D array, got shape {x.shape}")
    return x


def read_only(x: np.ndarray) -> np.ndarray:
    """Return ``x`` with its writeable flag cleared."""
    x.setflags(write=False)
    return x
