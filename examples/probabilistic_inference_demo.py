"""Example: Gaussian-mixture HMMs with hmmkit

Demonstrates sampling, Viterbi decoding and a caller-driven EM loop.
"""

import logging

import numpy as np

from hmmkit import (
    GaussianMixtureModel,
    HiddenMarkovModel,
    configure_logging,
    get_logger,
    viterbi_decode,
)


def example_viterbi_decoding():
    """Example: Decoding a regime sequence from noisy readings."""
    print("=" * 60)
    print("Example 1: Viterbi Decoding")
    print("=" * 60)

    # Two regimes: a calm one centred at -1 and a bimodal active one
    hmm = HiddenMarkovModel(
        start_prob=np.array([0.6, 0.4]),
        trans_mat=np.array([[0.7, 0.3], [0.4, 0.6]]),
        observation_models=[
            GaussianMixtureModel([-1.0], [1.0]),
            GaussianMixtureModel([1.5, 2.5], [0.5, 1.0], [0.3, 0.7]),
        ],
        state_names=["calm", "active"],
    )

    rng = np.random.default_rng(42)
    true_states, observations = hmm.sample(20, rng=rng)

    print(f"True states:     {true_states}")
    print(f"Observations:    {np.round([o.value for o in observations], 2)}")

    path, log_prob = viterbi_decode(observations, hmm)
    print(f"Decoded states:  {path}")
    print(f"Path log-probability: {log_prob:.4f}")
    print(f"Accuracy: {np.mean(path == true_states):.2%}")
    print()


def example_em_iterations():
    """Example: Running EM one step at a time."""
    print("=" * 60)
    print("Example 2: Step-wise EM on a Gaussian Mixture")
    print("=" * 60)

    rng = np.random.default_rng(42)
    data = np.concatenate([rng.normal(-3.0, 0.5, size=150), rng.normal(3.0, 0.5, size=150)])

    gmm = GaussianMixtureModel([-1.0, 1.0], [1.0, 1.0])
    print(f"Initial log-likelihood: {gmm.log_likelihood(data):.4f}")

    # The loop and its stopping rule belong to the caller
    for iteration in range(1, 21):
        updated = gmm.fit(data)
        improvement = updated.log_likelihood(data) - gmm.log_likelihood(data)
        gmm = updated
        if abs(improvement) < 1e-8:
            break

    print(f"Stopped after {iteration} iterations")
    print(f"Final log-likelihood: {gmm.log_likelihood(data):.4f}")
    print(gmm.to_string(lambda v: f"{v:.3f}"))
    print()


def example_viterbi_training():
    """Example: Hard-assignment training of per-state models."""
    print("=" * 60)
    print("Example 3: Viterbi Training Loop")
    print("=" * 60)

    rng = np.random.default_rng(7)
    truth = HiddenMarkovModel(
        start_prob=[0.5, 0.5],
        trans_mat=[[0.9, 0.1], [0.1, 0.9]],
        observation_models=[GaussianMixtureModel([-2.0], [0.5]), GaussianMixtureModel([2.0], [0.5])],
    )
    _, observations = truth.sample(500, rng=rng)
    values = np.array([o.value for o in observations])

    hmm = HiddenMarkovModel(
        start_prob=[0.5, 0.5],
        trans_mat=[[0.9, 0.1], [0.1, 0.9]],
        observation_models=[GaussianMixtureModel.uniform(1), GaussianMixtureModel([1.0], [1.0])],
    )

    for _ in range(10):
        path = hmm.decode(observations).state_sequence
        for state in range(hmm.n_states):
            weights = (path == state).astype(float)
            if weights.sum() > 0:
                refit = hmm.observation_model(state).fit(values, weights / weights.sum())
                hmm.set_observation_model(state, refit)

    for state, model in enumerate(hmm.observation_models):
        print(f"State {state}: mean={model.means[0]:.3f}, variance={model.variances[0]:.3f}")
    print()


if __name__ == "__main__":
    configure_logging(level=logging.INFO)
    logger = get_logger("examples")
    logger.info("Running hmmkit examples")

    example_viterbi_decoding()
    example_em_iterations()
    example_viterbi_training()

    print("=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)
