# approxvi_jax/inference/__init__.py
from __future__ import annotations

"""
Inference layer.

A method consumes an unnormalised log-density (energy.base.LogDensity) and
returns a run object. FixedSampleVI optimises the finite-sample ELBO
(energy.elbo) with the optimisers in `optimisers` and reports progress
through `monitor`.
"""

from .base import InferenceMethod
from .vi import FixedSampleVI, VICFG, VIRun, GRADIENT_MODES
from .monitor import ELBOMonitor

__all__ = [
    "InferenceMethod",
    "FixedSampleVI", "VICFG", "VIRun", "GRADIENT_MODES",
    "ELBOMonitor",
]
