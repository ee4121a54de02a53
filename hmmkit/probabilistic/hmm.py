"""Hidden Markov Model container with pluggable observation models.

Holds the initial distribution, the transition matrix and one
:class:`~hmmkit.probabilistic.observation.ObservationModel` per state. It
exposes the read-only view used by :func:`viterbi_decode`, and lets a
training loop swap in reestimated observation models.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from .observation import Observation, ObservationModel, ScalarObservation
from .utils import read_only
from .viterbi import ViterbiResult, viterbi_decode


class HiddenMarkovModel:
    """Hidden Markov Model over scalar observations.

    Attributes:
        n_states: Number of hidden states.
        start_prob: Initial state distribution, shape (n_states,). Read-only.
        trans_mat: Transition matrix, shape (n_states, n_states). Read-only.
        state_names: Optional names for states.
    """

    def __init__(
        self,
        start_prob: Sequence[float],
        trans_mat: Sequence[Sequence[float]],
        observation_models: Sequence[ObservationModel],
        state_names: Optional[List[str]] = None,
    ):
        """Initialize HMM.

        Args:
            start_prob: Initial state probabilities, shape (n_states,).
                Normalized to sum to 1.
            trans_mat: Transition matrix, shape (n_states, n_states). Each row
                is normalized to sum to 1; all-zero rows are kept as is.
            observation_models: One observation model per state.
            state_names: Optional state names.

        Raises:
            ValueError: On shape mismatches or negative probabilities.
        """
        start_prob = np.asarray(start_prob, dtype=np.float64)
        if start_prob.ndim != 1 or len(start_prob) < 1:
            raise ValueError(f"start_prob must be a non-empty 1D array, got shape {start_prob.shape}")
        n_states = len(start_prob)

        if np.any(start_prob < 0):
            raise ValueError("start_prob must be non-negative")
        total = np.sum(start_prob)
        if not total > 0:
            raise ValueError("start_prob must have a strictly positive sum")

        trans_mat = np.asarray(trans_mat, dtype=np.float64)
        if trans_mat.shape != (n_states, n_states):
            raise ValueError(f"trans_mat shape {trans_mat.shape} != ({n_states}, {n_states})")
        if np.any(trans_mat < 0):
            raise ValueError("trans_mat must be non-negative")

        observation_models = list(observation_models)
        if len(observation_models) != n_states:
            raise ValueError(
                f"Got {len(observation_models)} observation models for {n_states} states"
            )

        if state_names is not None and len(state_names) != n_states:
            raise ValueError(f"Got {len(state_names)} state names for {n_states} states")

        row_sums = np.sum(trans_mat, axis=1, keepdims=True)
        row_sums[row_sums == 0] = 1.0  # Avoid division by zero

        self.n_states = n_states
        self.state_names = state_names
        self.start_prob = read_only(start_prob / total)
        self.trans_mat = read_only(trans_mat / row_sums)
        self._observation_models = observation_models

    def initial_probability(self, state: int) -> float:
        return float(self.start_prob[state])

    def transition_probability(self, i: int, j: int) -> float:
        return float(self.trans_mat[i, j])

    def observation_model(self, state: int) -> ObservationModel:
        return self._observation_models[state]

    @property
    def observation_models(self) -> Tuple[ObservationModel, ...]:
        return tuple(self._observation_models)

    def set_observation_model(self, state: int, model: ObservationModel) -> None:
        """Replace the observation model of ``state``, e.g. with a fit result."""
        if not 0 <= state < self.n_states:
            raise ValueError(f"state {state} out of range for {self.n_states} states")
        self._observation_models[state] = model

    def decode(self, obs_seq: Sequence[Observation]) -> ViterbiResult:
        """Most likely state sequence (Viterbi) and its log-probability."""
        return viterbi_decode(obs_seq, self)

    def predict(self, obs_seq: Sequence[Observation]) -> np.ndarray:
        """Most likely state sequence (Viterbi), shape (T,)."""
        return self.decode(obs_seq).state_sequence

    def sample(
        self, length: int, rng: Optional[np.random.Generator] = None
    ) -> Tuple[np.ndarray, List[ScalarObservation]]:
        """Sample a state sequence and matching observations.

        Args:
            length: Sequence length T.
            rng: Random number generator. If None, uses default_rng(0).

        Returns:
            Tuple of (states, observations): states has shape (T,), and
            observations is a list of T :class:`ScalarObservation`.
        """
        if length < 0:
            raise ValueError("length must be non-negative")
        if rng is None:
            rng = np.random.default_rng(0)

        states = np.zeros(length, dtype=int)
        observations: List[ScalarObservation] = []

        for t in range(length):
            if t == 0:
                states[t] = rng.choice(self.n_states, p=self.start_prob)
            else:
                states[t] = rng.choice(self.n_states, p=self.trans_mat[states[t - 1], :])
            observations.append(self._observation_models[states[t]].generate(rng))

        return states, observations
