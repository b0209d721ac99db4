# approxvi_jax/inference/optimisers.py
"""
Optimisers for the (deterministic) negative finite-sample ELBO.

Since the latent samples are fixed, the objective is an ordinary smooth
function of the flat variational parameter vector. That is what allows
quasi-Newton (L-BFGS) and simplex (Nelder-Mead) methods without tuning a
learning rate. First-order optax optimisers are offered as well.

Every optimiser calls `callback(x)` once per iteration with the current
parameter vector.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import jax.numpy as jnp
import numpy as np
import optax
from scipy.optimize import minimize
from tqdm.auto import tqdm

GRADIENT_OPTIMIZERS = ("lbfgs", "adam", "sgd", "rmsprop")


@dataclass
class OptimiseResult:
    x: np.ndarray
    nit: int
    message: str


def nelder_mead(
    fun: Callable[[np.ndarray], float],
    x0: np.ndarray,
    iterations: int,
    callback: Optional[Callable[[np.ndarray], None]] = None,
) -> OptimiseResult:
    """Gradient-free minimisation with SciPy's Nelder-Mead simplex."""
    res = minimize(
        fun,
        np.asarray(x0, dtype=float),
        method="Nelder-Mead",
        callback=callback,
        options={"maxiter": iterations},
    )
    return OptimiseResult(x=np.asarray(res.x), nit=int(res.nit), message=str(res.message))


def lbfgs(
    fun_and_grad: Callable[[np.ndarray], tuple],
    x0: np.ndarray,
    iterations: int,
    callback: Optional[Callable[[np.ndarray], None]] = None,
) -> OptimiseResult:
    """L-BFGS via SciPy; fun_and_grad returns (value, gradient)."""
    res = minimize(
        fun_and_grad,
        np.asarray(x0, dtype=float),
        method="L-BFGS-B",
        jac=True,
        callback=callback,
        options={"maxiter": iterations},
    )
    return OptimiseResult(x=np.asarray(res.x), nit=int(res.nit), message=str(res.message))


def _get_optimizer(name: str, lr: float):
    if name == "sgd":
        return optax.sgd(lr)
    elif name == "adam":
        return optax.adam(lr)
    elif name == "rmsprop":
        return optax.rmsprop(lr)
    else:
        raise ValueError(f"Unknown optimizer: {name}")


def first_order(
    fun_and_grad: Callable[[np.ndarray], tuple],
    x0: np.ndarray,
    iterations: int,
    optimizer: str = "adam",
    lr: float = 1e-2,
    callback: Optional[Callable[[np.ndarray], None]] = None,
    verbose: bool = False,
) -> OptimiseResult:
    """Run `iterations` steps of an optax optimiser."""
    opt = _get_optimizer(optimizer, lr)
    x = jnp.asarray(x0)
    opt_state = opt.init(x)

    def iter_steps():
        if not verbose:
            return range(iterations)
        return tqdm(range(iterations), total=iterations, desc=f"VI ({optimizer})")

    for _ in iter_steps():
        _, grad = fun_and_grad(np.asarray(x))
        grad = jnp.asarray(grad)
        grad = jnp.where(jnp.isfinite(grad), grad, 0.0)
        updates, opt_state = opt.update(grad, opt_state, x)
        x = optax.apply_updates(x, updates)
        if callback is not None:
            callback(np.asarray(x))

    return OptimiseResult(
        x=np.asarray(x),
        nit=iterations,
        message=f"Completed {iterations} {optimizer} iterations",
    )
