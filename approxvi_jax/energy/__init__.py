# approxvi_jax/energy/__init__.py
from __future__ import annotations

from .base import LogDensity, GradLogDensity
from .elbo import (
    draw_latents,
    reparameterise,
    reparameterise_diag,
    gaussian_entropy,
    diag_gaussian_entropy,
    evaluate_logp,
    elbo_fs,
    elbo_fs_diag,
    elbo_fs_grad,
    elbo_fs_grad_diag,
    pack,
    unpack,
    pack_diag,
    unpack_diag,
)

__all__ = [
    "LogDensity",
    "GradLogDensity",
    "draw_latents",
    "reparameterise",
    "reparameterise_diag",
    "gaussian_entropy",
    "diag_gaussian_entropy",
    "evaluate_logp",
    "elbo_fs",
    "elbo_fs_diag",
    "elbo_fs_grad",
    "elbo_fs_grad_diag",
    "pack",
    "unpack",
    "pack_diag",
    "unpack_diag",
]
