"""Tests for the Hidden Markov Model container."""

import numpy as np
import pytest

from hmmkit.probabilistic import (
    GaussianMixtureModel,
    HiddenMarkovModel,
    ScalarObservation,
    viterbi_decode,
)


def _models(n):
    return [GaussianMixtureModel([float(i)], [1.0]) for i in range(n)]


def test_hmm_normalizes_parameters():
    """Test that start and transition probabilities are normalized."""
    hmm = HiddenMarkovModel(
        start_prob=[1.0, 3.0],
        trans_mat=[[2.0, 2.0], [1.0, 3.0]],
        observation_models=_models(2),
    )

    assert hmm.n_states == 2
    assert np.allclose(hmm.start_prob, [0.25, 0.75])
    assert np.allclose(hmm.trans_mat, [[0.5, 0.5], [0.25, 0.75]])
    assert hmm.initial_probability(1) == pytest.approx(0.75)
    assert hmm.transition_probability(1, 0) == pytest.approx(0.25)


def test_hmm_zero_row_kept():
    """Test that an all-zero transition row does not divide by zero."""
    hmm = HiddenMarkovModel(
        start_prob=[0.5, 0.5],
        trans_mat=[[0.0, 0.0], [0.5, 0.5]],
        observation_models=_models(2),
    )
    assert np.array_equal(hmm.trans_mat[0], [0.0, 0.0])


def test_hmm_parameters_read_only():
    """Test that stored parameters cannot be changed in place."""
    hmm = HiddenMarkovModel([0.5, 0.5], [[0.5, 0.5], [0.5, 0.5]], _models(2))
    with pytest.raises(ValueError):
        hmm.trans_mat[0, 0] = 1.0
    with pytest.raises(ValueError):
        hmm.start_prob[0] = 1.0


@pytest.mark.parametrize(
    "start_prob, trans_mat, n_models",
    [
        ([], [], 0),
        ([[0.5, 0.5]], [[0.5, 0.5], [0.5, 0.5]], 2),
        ([0.5, 0.5], [[1.0]], 2),
        ([0.5, 0.5], [[0.5, 0.5], [0.5, 0.5]], 3),
        ([-0.5, 1.5], [[0.5, 0.5], [0.5, 0.5]], 2),
        ([0.0, 0.0], [[0.5, 0.5], [0.5, 0.5]], 2),
        ([0.5, 0.5], [[1.5, -0.5], [0.5, 0.5]], 2),
    ],
)
def test_hmm_rejects_invalid(start_prob, trans_mat, n_models):
    """Test constructor validation."""
    with pytest.raises(ValueError):
        HiddenMarkovModel(start_prob, trans_mat, _models(n_models))


def test_hmm_state_names_length():
    """Test that state names must match the state count."""
    hmm = HiddenMarkovModel([1.0], [[1.0]], _models(1), state_names=["quiet"])
    assert hmm.state_names == ["quiet"]
    with pytest.raises(ValueError, match="state names"):
        HiddenMarkovModel([1.0], [[1.0]], _models(1), state_names=["a", "b"])


def test_hmm_observation_models():
    """Test access to per-state observation models."""
    models = _models(2)
    hmm = HiddenMarkovModel([0.5, 0.5], [[0.5, 0.5], [0.5, 0.5]], models)

    assert hmm.observation_model(1) is models[1]
    assert hmm.observation_models == tuple(models)


def test_set_observation_model_swaps_reference():
    """Test that a fit result replaces the state's model."""
    hmm = HiddenMarkovModel([0.5, 0.5], [[0.5, 0.5], [0.5, 0.5]], _models(2))
    old = hmm.observation_model(0)

    new = old.fit([0.2, -0.4, 0.1])
    hmm.set_observation_model(0, new)

    assert hmm.observation_model(0) is new
    assert hmm.observation_model(0) is not old


def test_set_observation_model_out_of_range():
    """Test that unknown states are rejected."""
    hmm = HiddenMarkovModel([1.0], [[1.0]], _models(1))
    with pytest.raises(ValueError, match="out of range"):
        hmm.set_observation_model(1, GaussianMixtureModel.uniform(1))


def test_hmm_sample_shapes(toy_hmm, rng):
    """Test sample output shapes and types."""
    states, observations = toy_hmm.sample(30, rng=rng)

    assert states.shape == (30,)
    assert len(observations) == 30
    assert all(isinstance(o, ScalarObservation) for o in observations)
    assert np.all((states >= 0) & (states < 2))


def test_hmm_sample_empty(toy_hmm, rng):
    """Test that a zero-length sample is empty."""
    states, observations = toy_hmm.sample(0, rng=rng)
    assert states.shape == (0,)
    assert observations == []


def test_hmm_sample_reproducible(toy_hmm):
    """Test that sampling is reproducible with the same seed."""
    states1, obs1 = toy_hmm.sample(25, rng=np.random.default_rng(3))
    states2, obs2 = toy_hmm.sample(25, rng=np.random.default_rng(3))

    assert np.array_equal(states1, states2)
    assert obs1 == obs2


def test_hmm_sample_follows_structure(rng):
    """Test that sampling honours a deterministic start and absorbing state."""
    hmm = HiddenMarkovModel(
        start_prob=[0.0, 1.0],
        trans_mat=[[1.0, 0.0], [0.0, 1.0]],
        observation_models=[GaussianMixtureModel([-50.0], [1.0]), GaussianMixtureModel([50.0], [1.0])],
    )

    states, observations = hmm.sample(20, rng=rng)

    assert np.all(states == 1)
    assert all(o.value > 0 for o in observations)


def test_hmm_decode_matches_viterbi(toy_hmm, rng):
    """Test the decode and predict convenience wrappers."""
    _, observations = toy_hmm.sample(15, rng=rng)

    result = toy_hmm.decode(observations)
    direct = viterbi_decode(observations, toy_hmm)

    assert np.array_equal(result.state_sequence, direct.state_sequence)
    assert result.log_probability == direct.log_probability
    assert np.array_equal(toy_hmm.predict(observations), direct.state_sequence)


def test_hard_assignment_training_loop(toy_hmm, rng):
    """Test a caller-driven loop: decode, refit each state, swap models."""
    _, observations = toy_hmm.sample(300, rng=rng)
    values = np.array([o.value for o in observations])

    hmm = HiddenMarkovModel(
        start_prob=toy_hmm.start_prob,
        trans_mat=toy_hmm.trans_mat,
        observation_models=[GaussianMixtureModel([-0.5], [2.0]), GaussianMixtureModel([1.0], [2.0])],
    )
    initial_log_prob = hmm.decode(observations).log_probability

    for _ in range(5):
        path = hmm.decode(observations).state_sequence
        for state in range(hmm.n_states):
            weights = (path == state).astype(float)
            if weights.sum() > 0:
                hmm.set_observation_model(
                    state, hmm.observation_model(state).fit(values, weights / weights.sum())
                )

    final = hmm.decode(observations)
    assert np.isfinite(final.log_probability)
    assert final.log_probability > initial_log_prob
    assert hmm.observation_model(0).means[0] < hmm.observation_model(1).means[0]
