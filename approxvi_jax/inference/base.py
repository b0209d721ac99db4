# approxvi_jax/inference/base.py
from __future__ import annotations

from typing import Protocol, runtime_checkable, Any

from ..energy.base import LogDensity


@runtime_checkable
class InferenceMethod(Protocol):
    """
    Protocol for inference methods.

    Design principles
    -----------------
    - An InferenceMethod consumes a LogDensity and an initial state.
    - It MUST treat the LogDensity as a black box (only call it on theta).
    - It MAY accept configuration (sample sizes, optimiser, monitoring).

    The exact `run` signature is method-specific; FixedSampleVI takes the
    initial mean or an initial GaussianPosterior and returns a VIRun.
    """

    def run(self, logp: LogDensity, init: Any, **kwargs) -> Any:
        """
        Run inference on the given log-density.

        Parameters
        ----------
        logp : LogDensity
            Unnormalised log-posterior. Must be treated as a black box.
        init : Any
            Initial state (method-specific).

        Returns
        -------
        Any
            Inference results (method-specific).
        """
        ...
