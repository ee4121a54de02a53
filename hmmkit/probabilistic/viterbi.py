"""Viterbi decoding in the negative-log domain.

Finds the most likely hidden-state path of an observation sequence under an
HMM. Path costs are accumulated as negative log-probabilities so long
sequences do not underflow.

References:
    Rabiner, L. R. (1989). A tutorial on hidden Markov models and selected
    applications in speech recognition. Proceedings of the IEEE, 77(2),
    257-286. Section III-B.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Protocol, Sequence

import numpy as np

from ..logging import get_logger
from .observation import Observation, ObservationModel
from .utils import neg_log, read_only

logger = get_logger(__name__)


class MarkovModel(Protocol):
    """Read-only view of an HMM consumed by :func:`viterbi_decode`."""

    @property
    def n_states(self) -> int:
        ...

    def initial_probability(self, state: int) -> float:
        ...

    def transition_probability(self, i: int, j: int) -> float:
        ...

    def observation_model(self, state: int) -> ObservationModel:
        ...


@dataclass(frozen=True, eq=False)
class ViterbiResult:
    """Most likely state path and its log-probability.

    Attributes:
        state_sequence: State index at each time step, shape (T,). Read-only.
        log_probability: ``ln P(observations, state_sequence | hmm)``.
    """

    state_sequence: np.ndarray
    log_probability: float

    def __iter__(self) -> Iterator:
        return iter((self.state_sequence, self.log_probability))

    def __len__(self) -> int:
        return len(self.state_sequence)


def _argmin_first(costs: np.ndarray) -> int:
    """Index of the first strict minimum, scanning upward from 0.

    NaN entries never win. If nothing is below ``+inf``, returns 0.
    """
    best = 0
    best_cost = np.inf
    for i, cost in enumerate(costs):
        if cost < best_cost:
            best_cost = cost
            best = i
    return best


def viterbi_decode(observations: Sequence[Observation], hmm: MarkovModel) -> ViterbiResult:
    """Compute the most likely state sequence for ``observations``.

    Ties between predecessor states, and between final states, go to the
    lowest state index. Zero probabilities give infinite costs and NaN
    densities give NaN costs; both propagate into the result without raising.

    Args:
        observations: Observation sequence of length T >= 1.
        hmm: Model exposing states, initial/transition probabilities and
            per-state observation models.

    Returns:
        :class:`ViterbiResult` with the decoded path and its log-probability.

    Raises:
        ValueError: If ``observations`` is empty.

    Complexity:
        O(T * N^2) time and O(T * N) space for N states.
    """
    observations = list(observations)
    T = len(observations)
    if T == 0:
        raise ValueError("Cannot decode an empty observation sequence")

    n_states = hmm.n_states
    models = [hmm.observation_model(s) for s in range(n_states)]

    neg_log_trans = np.array(
        [[neg_log(hmm.transition_probability(i, j)) for j in range(n_states)] for i in range(n_states)],
        dtype=np.float64,
    ).reshape(n_states, n_states)

    cost = np.zeros((T, n_states))
    backpointer = np.zeros((T, n_states), dtype=int)

    # Initialization
    for s in range(n_states):
        cost[0, s] = neg_log(hmm.initial_probability(s)) + neg_log(
            models[s].probability(observations[0])
        )

    # Recursion
    with np.errstate(invalid="ignore"):
        for t in range(1, T):
            for j in range(n_states):
                candidates = cost[t - 1, :] + neg_log_trans[:, j]
                best_prev = _argmin_first(candidates)
                cost[t, j] = candidates[best_prev] + neg_log(
                    models[j].probability(observations[t])
                )
                backpointer[t, j] = best_prev

    # Termination
    best_final = _argmin_first(cost[T - 1, :])
    log_prob = float(-cost[T - 1, best_final])

    # Backtracking
    path = np.zeros(T, dtype=int)
    path[T - 1] = best_final
    for t in range(T - 2, -1, -1):
        path[t] = backpointer[t + 1, path[t + 1]]

    logger.debug("Decoded %d observations over %d states, log-probability %g", T, n_states, log_prob)

    return ViterbiResult(state_sequence=read_only(path), log_probability=log_prob)
