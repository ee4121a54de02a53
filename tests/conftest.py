"""Pytest configuration and shared fixtures for hmmkit tests.

This module provides:
- A deterministic numpy RNG fixture
- A small two-state HMM with Gaussian-mixture emissions used across tests
"""

import os

import numpy as np
import pytest

from hmmkit.probabilistic import GaussianMixtureModel, HiddenMarkovModel


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed numpy's global RNG so nothing depends on test ordering."""
    np.random.seed(_seed())


@pytest.fixture
def toy_hmm() -> HiddenMarkovModel:
    """Two-state HMM: state 0 emits around -1, state 1 around +2."""
    return HiddenMarkovModel(
        start_prob=[0.6, 0.4],
        trans_mat=[[0.7, 0.3], [0.4, 0.6]],
        observation_models=[
            GaussianMixtureModel([-1.0], [1.0]),
            GaussianMixtureModel([1.5, 2.5], [0.5, 1.0], [0.3, 0.7]),
        ],
    )
