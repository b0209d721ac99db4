# approxvi_jax/problems.py
"""
Synthetic target log-posteriors for examples and tests.
"""
from __future__ import annotations

from typing import Callable, Tuple

import jax.numpy as jnp


def example_problem_1() -> Callable:
    """
    Synthetic two-dimensional problem.

    A "banana": x1 is Gaussian, x2 is Gaussian around a quadratic in x1, so the
    target is correlated and skewed and no Gaussian matches it exactly.

    Example:
        >>> logp = example_problem_1()  # target distribution to approximate
        >>> q, logev = vi(logp, jnp.zeros(2), S=100, iterations=10_000, show_every=50)
        >>> xs = jnp.linspace(-3, 3, 301)
        >>> grid = jnp.stack(jnp.meshgrid(xs, xs), axis=-1).reshape(-1, 2)
        >>> target = jnp.exp(jax.vmap(logp)(grid))  # plot with contourf
        >>> approx = q.pdf(grid)                    # plot on top with contour
    """
    s1 = 1.0  # std of x1
    s2 = 0.5  # std of x2 around the curve
    b = 0.5   # curvature

    def logp(x):
        x1, x2 = x[0], x[1]
        return -0.5 * ((x1 / s1) ** 2 + ((x2 - b * (x1 ** 2 - s1 ** 2)) / s2) ** 2)

    return logp


def gaussian_problem(cov) -> Tuple[Callable, Callable]:
    """
    Unnormalised zero-mean Gaussian target, logp(x) = -x^T cov^{-1} x / 2.

    Returns (logp, grad_logp). The Gaussian family contains this target, so
    with enough samples VI should recover cov.
    """
    cov = jnp.asarray(cov)
    prec = jnp.linalg.inv(cov)

    def logp(x):
        return -0.5 * x @ (prec @ x)

    def grad_logp(x):
        return -(prec @ x)

    return logp, grad_logp
