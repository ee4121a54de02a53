"""Scalar observations and the observation-model interface.

An observation model is the per-state emission distribution of an HMM. The
decoder only needs :meth:`ObservationModel.probability`; training loops use
:meth:`ObservationModel.fit`, which returns a new model instead of updating
the receiver.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, Union

import numpy as np

Formatter = Callable[[float], str]


@dataclass(frozen=True)
class ScalarObservation:
    """One real-valued measurement.

    Args:
        value: The measured value.
    """

    value: float

    def __float__(self) -> float:
        return float(self.value)


Observation = Union[ScalarObservation, float]


def default_formatter(value: float) -> str:
    """Format a number the way :meth:`ObservationModel.to_string` does by default."""
    return f"{value:g}"


class ObservationModel(ABC):
    """Probability distribution over scalar observations.

    Implementations are treated as immutable: :meth:`fit` performs a single
    reestimation step and returns a fresh model.
    """

    @abstractmethod
    def probability(self, observation: Observation) -> float:
        """Density of one observation under this distribution."""

    @abstractmethod
    def generate(self, rng: np.random.Generator) -> ScalarObservation:
        """Draw one observation using ``rng``."""

    @abstractmethod
    def fit(
        self,
        observations: Iterable[Observation],
        weights: Optional[Sequence[float]] = None,
    ) -> "ObservationModel":
        """Run one reestimation step on weighted observations.

        Args:
            observations: Non-empty collection of observations.
            weights: One weight per observation. If None, every observation
                gets weight ``1/N``.

        Returns:
            The reestimated model.

        Raises:
            ValueError: If ``observations`` is empty or ``weights`` has a
                different length.
        """

    @abstractmethod
    def clone(self) -> "ObservationModel":
        """Independent copy of this model."""

    @abstractmethod
    def to_string(self, formatter: Optional[Formatter] = None) -> str:
        """Render the model parameters through ``formatter``."""

    def __copy__(self) -> "ObservationModel":
        return self.clone()

    def __deepcopy__(self, memo: dict) -> "ObservationModel":
        return self.clone()

    def __str__(self) -> str:
        return self.to_string()
