"""Univariate Gaussian mixture observation model with one-step EM.

A mixture is immutable once built. :meth:`GaussianMixtureModel.fit` runs a
single expectation-maximization iteration on weighted observations and
returns a new mixture, leaving convergence looping to the caller.

References:
    Rabiner, L. R. (1989). A tutorial on hidden Markov models and selected
    applications in speech recognition. Proceedings of the IEEE, 77(2),
    257-286. Equations (52)-(54).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from ..logging import get_logger
from .observation import (
    Formatter,
    Observation,
    ObservationModel,
    ScalarObservation,
    default_formatter,
)
from .utils import (
    ensure_1d,
    log_normal_pdf,
    normal_pdf,
    normalize_proportions,
    observation_values,
    read_only,
    uniform_weights,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class GaussianComponent:
    """One univariate Gaussian of a mixture.

    Args:
        mean: Component mean.
        variance: Component variance.
    """

    mean: float
    variance: float

    def probability(self, x: float) -> float:
        """Density at ``x``."""
        return float(normal_pdf(float(x), self.mean, self.variance))

    def log_probability(self, x: float) -> float:
        """Log-density at ``x``."""
        return float(log_normal_pdf(float(x), self.mean, self.variance))

    def generate(self, rng: np.random.Generator) -> float:
        """Draw one value from this Gaussian."""
        return float(rng.normal(self.mean, np.sqrt(self.variance)))


class GaussianMixtureModel(ObservationModel):
    """Weighted mixture of univariate Gaussians.

    ``probability(x) = sum_i proportions[i] * N(x; means[i], variances[i])``

    Attributes:
        n_components: Number of mixture components K.
        means: Component means, shape (K,). Returned as a copy.
        variances: Component variances, shape (K,). Returned as a copy.
        proportions: Mixing proportions summing to 1, shape (K,). Returned as
            a copy.
    """

    def __init__(
        self,
        means: Sequence[float],
        variances: Sequence[float],
        proportions: Optional[Sequence[float]] = None,
    ):
        """Initialize a mixture from explicit parameters.

        Args:
            means: Component means.
            variances: Component variances, each strictly positive.
            proportions: Mixing proportions. They need not be normalized but
                must be non-negative with a strictly positive sum. If None,
                components are weighted uniformly.

        Raises:
            ValueError: If the arrays are empty, of different lengths, or
                violate the constraints above.
        """
        means = ensure_1d(np.asarray(means, dtype=np.float64))
        variances = ensure_1d(np.asarray(variances, dtype=np.float64))

        n_components = len(means)
        if n_components < 1:
            raise ValueError("A mixture needs at least one component")
        if variances.shape != (n_components,):
            raise ValueError(f"variances shape {variances.shape} != ({n_components},)")
        if not np.all(variances > 0):
            raise ValueError("variances must be strictly positive")

        if proportions is None:
            proportions = uniform_weights(n_components)
        else:
            proportions = normalize_proportions(proportions, n_components)

        self._set_parameters(means, variances, proportions)

    @classmethod
    def uniform(cls, n_components: int) -> "GaussianMixtureModel":
        """Mixture with means spread evenly over [0, 1], unit variances and
        equal proportions.

        Args:
            n_components: Number of components K >= 1. Means are
                ``(i + 0.5) / K``.

        Raises:
            ValueError: If ``n_components < 1``.
        """
        if n_components < 1:
            raise ValueError("n_components must be >= 1")
        means = (np.arange(n_components) + 0.5) / n_components
        return cls(means, np.ones(n_components))

    @classmethod
    def _from_parameters(
        cls, means: np.ndarray, variances: np.ndarray, proportions: np.ndarray
    ) -> "GaussianMixtureModel":
        # Reestimated parameters go in as computed, including non-finite ones.
        model = cls.__new__(cls)
        model._set_parameters(means, variances, proportions)
        return model

    def _set_parameters(
        self, means: np.ndarray, variances: np.ndarray, proportions: np.ndarray
    ) -> None:
        self._means = read_only(np.array(means, dtype=np.float64))
        self._variances = read_only(np.array(variances, dtype=np.float64))
        self._proportions = read_only(np.array(proportions, dtype=np.float64))

    @property
    def n_components(self) -> int:
        return len(self._means)

    @property
    def means(self) -> np.ndarray:
        return self._means.copy()

    @property
    def variances(self) -> np.ndarray:
        return self._variances.copy()

    @property
    def proportions(self) -> np.ndarray:
        return self._proportions.copy()

    @property
    def components(self) -> Tuple[GaussianComponent, ...]:
        return tuple(
            GaussianComponent(float(m), float(v)) for m, v in zip(self._means, self._variances)
        )

    def _weighted_densities(self, values: np.ndarray) -> np.ndarray:
        """``proportions[i] * N(values[t]; means[i], variances[i])``, shape (K, N)."""
        densities = normal_pdf(
            values[np.newaxis, :], self._means[:, np.newaxis], self._variances[:, np.newaxis]
        )
        with np.errstate(invalid="ignore"):
            return self._proportions[:, np.newaxis] * densities

    def probability(self, observation: Observation) -> float:
        """Mixture density of one observation."""
        return float(self.probabilities([observation])[0])

    def probabilities(self, observations: Iterable[Observation]) -> np.ndarray:
        """Mixture density of each observation.

        Args:
            observations: Observations or plain values.

        Returns:
            Densities, shape (N,).
        """
        values = observation_values(observations)
        with np.errstate(invalid="ignore"):
            return np.sum(self._weighted_densities(values), axis=0)

    def log_likelihood(self, observations: Iterable[Observation]) -> float:
        """Total log-likelihood ``sum_t ln probability(x_t)``."""
        with np.errstate(divide="ignore"):
            return float(np.sum(np.log(self.probabilities(observations))))

    def responsibilities(self, observations: Iterable[Observation]) -> np.ndarray:
        """Posterior probability of each component for each observation.

        Args:
            observations: Observations or plain values.

        Returns:
            Responsibility matrix, shape (K, N). Each column sums to 1 unless
            the mixture density of that observation is zero or non-finite.
        """
        values = observation_values(observations)
        weighted = self._weighted_densities(values)
        with np.errstate(divide="ignore", invalid="ignore"):
            return weighted / np.sum(weighted, axis=0)[np.newaxis, :]

    def generate(self, rng: np.random.Generator) -> ScalarObservation:
        """Pick a component by its proportion, then sample from it.

        Args:
            rng: Random number generator supplying both draws.

        Returns:
            The sampled observation.

        Raises:
            ValueError: If the proportions contain NaN, as after fitting on an
                observation with zero mixture density. The error comes from
                ``rng.choice``.
        """
        k = rng.choice(self.n_components, p=self._proportions)
        component = GaussianComponent(float(self._means[k]), float(self._variances[k]))
        return ScalarObservation(component.generate(rng))

    def fit(
        self,
        observations: Iterable[Observation],
        weights: Optional[Sequence[float]] = None,
    ) -> "GaussianMixtureModel":
        """Run one EM iteration and return the reestimated mixture.

        The variance update measures spread around the means *before* this
        iteration, not around the freshly reestimated ones.

        Components that receive no responsibility mass end up with NaN
        parameters; nothing is clamped or regularized.

        Args:
            observations: Non-empty collection of observations.
            weights: One weight per observation. If None, uses ``1/N`` each.

        Returns:
            A new :class:`GaussianMixtureModel`. ``self`` is unchanged.

        Raises:
            ValueError: If ``observations`` is empty or the number of weights
                differs from the number of observations.
        """
        values = observation_values(observations)
        n_obs = len(values)
        if n_obs == 0:
            raise ValueError("Cannot fit on an empty observation collection")

        if weights is None:
            weights = uniform_weights(n_obs)
        else:
            weights = ensure_1d(np.asarray(weights, dtype=np.float64))
            if weights.shape != (n_obs,):
                raise ValueError(f"Got {len(weights)} weights for {n_obs} observations")

        # E-step
        delta = self.responsibilities(values)

        # M-step
        with np.errstate(divide="ignore", invalid="ignore"):
            weighted = weights[np.newaxis, :] * delta
            mass = np.sum(weighted, axis=1)

            new_proportions = mass / np.sum(mass)
            new_means = np.sum(weighted * values[np.newaxis, :], axis=1) / mass

            diff = values[np.newaxis, :] - self._means[:, np.newaxis]
            new_variances = np.sum(weighted * diff * diff, axis=1) / mass

        logger.debug(
            "EM step over %d observations, %d components, proportion total %.12g",
            n_obs,
            self.n_components,
            np.sum(new_proportions),
        )
        if not (
            np.all(np.isfinite(new_means))
            and np.all(np.isfinite(new_variances))
            and np.all(np.isfinite(new_proportions))
        ):
            logger.debug("Reestimated mixture has non-finite parameters")

        return GaussianMixtureModel._from_parameters(new_means, new_variances, new_proportions)

    def clone(self) -> "GaussianMixtureModel":
        return GaussianMixtureModel._from_parameters(
            self._means, self._variances, self._proportions
        )

    def to_string(self, formatter: Optional[Formatter] = None) -> str:
        """Render each component's proportion, mean and variance.

        Args:
            formatter: Callable turning a float into text. Defaults to
                ``"{:g}"`` formatting.

        Returns:
            Multi-line description, one block per component in index order.
        """
        if formatter is None:
            formatter = default_formatter

        lines = ["Gaussian mixture distribution ---"]
        for i in range(self.n_components):
            lines.append(f"Gaussian {i + 1}:")
            lines.append(f"\tMixing Prop = {formatter(float(self._proportions[i]))}")
            lines.append(f"\tMean = {formatter(float(self._means[i]))}")
            lines.append(f"\tVariance = {formatter(float(self._variances[i]))}")
        return "\n".join(lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GaussianMixtureModel):
            return NotImplemented
        return (
            np.array_equal(self._means, other._means)
            and np.array_equal(self._variances, other._variances)
            and np.array_equal(self._proportions, other._proportions)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"GaussianMixtureModel(means={self._means.tolist()}, "
            f"variances={self._variances.tolist()}, "
            f"proportions={self._proportions.tolist()})"
        )
