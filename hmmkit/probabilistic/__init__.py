"""Probabilistic sequence tools: observation models, Gaussian mixtures and
Viterbi decoding.

This module provides:
- A pluggable observation-model interface for per-state emissions
- A univariate Gaussian mixture with one-step weighted EM reestimation
- Log-domain Viterbi decoding over any HMM exposing the MarkovModel view
- A small HMM container that plugs the pieces together

All computations are deterministic given the RNG passed in, and degenerate
numerics surface as NaN/inf rather than exceptions.
"""

from .gmm import GaussianComponent, GaussianMixtureModel
from .hmm import HiddenMarkovModel
from .observation import ObservationModel, ScalarObservation, default_formatter
from .utils import log_normal_pdf, neg_log, normal_pdf
from .viterbi import MarkovModel, ViterbiResult, viterbi_decode

__all__ = [
    "ScalarObservation",
    "ObservationModel",
    "GaussianComponent",
    "GaussianMixtureModel",
    "HiddenMarkovModel",
    "MarkovModel",
    "ViterbiResult",
    "viterbi_decode",
    "default_formatter",
    "normal_pdf",
    "log_normal_pdf",
    "neg_log",
]
