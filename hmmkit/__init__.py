"""hmmkit - Gaussian-mixture observation models and Viterbi decoding for HMMs."""

__version__ = "0.1.0"

from .logging import configure_logging, get_logger, set_log_level
from .probabilistic import (
    GaussianComponent,
    GaussianMixtureModel,
    HiddenMarkovModel,
    MarkovModel,
    ObservationModel,
    ScalarObservation,
    ViterbiResult,
    viterbi_decode,
)

__all__ = [
    "__version__",
    "ScalarObservation",
    "ObservationModel",
    "GaussianComponent",
    "GaussianMixtureModel",
    "HiddenMarkovModel",
    "MarkovModel",
    "ViterbiResult",
    "viterbi_decode",
    "get_logger",
    "set_log_level",
    "configure_logging",
]
