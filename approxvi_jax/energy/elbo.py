# approxvi_jax/energy/elbo.py
"""
Finite-sample ELBO via the reparametrisation trick.

Mathematical role
-----------------
For a Gaussian q(theta) = N(mu, C C^T) the evidence lower bound

    L(mu, Sigma) = E_q[ log p(D, theta) ] + H[q]

is approximated with S standard-normal latents z_s drawn once:

    L_FS(mu, C, Z) = 1/S sum_s log p(D, mu + C z_s) + H[q].

Because Z is fixed, L_FS is a deterministic function of (mu, C) and can be
maximised with quasi-Newton or gradient-free optimisers.

Design principles
-----------------
- Functions here are pure; Z is always passed in explicitly.
- No optimisation logic lives in this module.
- Variational parameters are packed into a single flat vector for the
  optimisers: [mu, vec(C)] for the full family, [mu, c] for the diagonal.
"""
from __future__ import annotations

from typing import Callable

import jax
import jax.numpy as jnp

_LOG_2PI_E = jnp.log(2.0 * jnp.pi) + 1.0


def draw_latents(key, S: int, D: int) -> jnp.ndarray:
    """Draw the fixed standard-normal latents Z with shape (S, D)."""
    if S < 1:
        raise ValueError(f"Number of samples must be positive, got {S}")
    return jax.random.normal(key, (S, D))


def reparameterise(mean, C, Z) -> jnp.ndarray:
    """theta_s = mean + C z_s for every row of Z; returns (S, D)."""
    return mean + Z @ C.T


def reparameterise_diag(mean, c, Z) -> jnp.ndarray:
    return mean + Z * c


def gaussian_entropy(C) -> jnp.ndarray:
    _, logabsdet = jnp.linalg.slogdet(C)
    return 0.5 * C.shape[0] * _LOG_2PI_E + logabsdet


def diag_gaussian_entropy(c) -> jnp.ndarray:
    return 0.5 * c.shape[0] * _LOG_2PI_E + jnp.sum(jnp.log(jnp.abs(c)))


def evaluate_logp(logp: Callable, thetas, vectorise: bool = True) -> jnp.ndarray:
    """
    Evaluate logp on each row of thetas (S, D) -> (S,).

    vectorise=True maps logp with jax.vmap and requires a JAX-traceable
    function. Otherwise logp is called once per sample.
    """
    if vectorise:
        return jax.vmap(logp)(thetas)
    return jnp.stack([jnp.asarray(logp(t)).reshape(()) for t in thetas])


def elbo_fs(logp: Callable, mean, C, Z, vectorise: bool = True) -> jnp.ndarray:
    """L_FS(mean, C, Z) for the full-covariance family."""
    thetas = reparameterise(mean, C, Z)
    return jnp.mean(evaluate_logp(logp, thetas, vectorise)) + gaussian_entropy(C)


def elbo_fs_diag(logp: Callable, mean, c, Z, vectorise: bool = True) -> jnp.ndarray:
    """L_FS(mean, diag(c), Z) for the diagonal family."""
    thetas = reparameterise_diag(mean, c, Z)
    return jnp.mean(evaluate_logp(logp, thetas, vectorise)) + diag_gaussian_entropy(c)


def elbo_fs_grad(grad_logp: Callable, mean, C, Z, vectorise: bool = True):
    """
    Gradient of L_FS from a user-supplied gradient of logp.

        d/dmu = 1/S sum_s g(theta_s)
        d/dC  = 1/S sum_s g(theta_s) z_s^T + C^{-T}

    Returns (d_mean, d_C).
    """
    thetas = reparameterise(mean, C, Z)
    G = evaluate_grad_logp(grad_logp, thetas, vectorise)  # (S, D)
    S = Z.shape[0]
    d_mean = jnp.mean(G, axis=0)
    d_C = G.T @ Z / S + jnp.linalg.inv(C).T
    return d_mean, d_C


def elbo_fs_grad_diag(grad_logp: Callable, mean, c, Z, vectorise: bool = True):
    """Diagonal counterpart of elbo_fs_grad; returns (d_mean, d_c)."""
    thetas = reparameterise_diag(mean, c, Z)
    G = evaluate_grad_logp(grad_logp, thetas, vectorise)
    d_mean = jnp.mean(G, axis=0)
    d_c = jnp.mean(G * Z, axis=0) + 1.0 / c
    return d_mean, d_c


def evaluate_grad_logp(grad_logp: Callable, thetas, vectorise: bool = True) -> jnp.ndarray:
    if vectorise:
        G = jax.vmap(grad_logp)(thetas)
    else:
        G = jnp.stack([jnp.asarray(grad_logp(t)).reshape(-1) for t in thetas])
    if G.shape != thetas.shape:
        raise ValueError(
            f"grad_logp must return arrays of shape {thetas.shape[1:]}, got {G.shape[1:]}"
        )
    return G


# ---------------------------------------------------------------------
# Parameter packing
# ---------------------------------------------------------------------

def pack(mean, C) -> jnp.ndarray:
    return jnp.concatenate([jnp.ravel(mean), jnp.ravel(C)])


def unpack(x, D: int):
    mean = x[:D]
    C = jnp.reshape(x[D:], (D, D))
    return mean, C


def pack_diag(mean, c) -> jnp.ndarray:
    return jnp.concatenate([jnp.ravel(mean), jnp.ravel(c)])


def unpack_diag(x, D: int):
    return x[:D], x[D:]
