# approxvi_jax/energy/base.py
from __future__ import annotations

from typing import Protocol, runtime_checkable
import jax.numpy as jnp


@runtime_checkable
class LogDensity(Protocol):
    """
    Protocol for unnormalised log-posteriors.

    Design principles
    -----------------
    - A LogDensity maps a single parameter vector theta (D,) to a scalar,
      log p(D, theta) up to an additive constant.
    - It MUST be side-effect free.
    - It SHOULD be written with jax.numpy when autodiff (gradientmode
      "forward" / "reverse") or vectorised evaluation is wanted. Plain
      NumPy log-densities work with the gradient-free and provided-gradient
      modes when evaluated sample by sample.

    Inference methods MUST treat LogDensity as a black box.
    """

    def __call__(self, theta: jnp.ndarray) -> jnp.ndarray:
        """
        Returns
        -------
        jnp.ndarray
            Scalar log-density (shape ()).
        """
        ...


@runtime_checkable
class GradLogDensity(Protocol):
    """
    Gradient of a LogDensity: theta (D,) -> (D,).
    """

    def __call__(self, theta: jnp.ndarray) -> jnp.ndarray:
        ...
