# approxvi_jax/core/gaussian.py
from __future__ import annotations

from dataclasses import dataclass

import jax
import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class

_LOG_2PI = jnp.log(2.0 * jnp.pi)


@register_pytree_node_class
@dataclass(frozen=True)
class GaussianPosterior:
    """
    Full-covariance Gaussian q(theta) = N(mean, C C^T).

    mean: (D,) mean vector
    C:    (D, D) matrix root of the covariance, i.e. C C^T = Sigma

    C is not required to be triangular: the optimiser works on the
    unconstrained root, so any square matrix with non-zero determinant
    is a valid parameterisation.
    """
    mean: jnp.ndarray
    C: jnp.ndarray

    def __post_init__(self):
        # tree_unflatten may hand us placeholders without a shape
        if not (hasattr(self.mean, "shape") and hasattr(self.C, "shape")):
            return
        if len(self.mean.shape) != 1:
            raise ValueError(f"mean must be one-dimensional, got shape {self.mean.shape}")
        D = self.mean.shape[0]
        if self.C.shape != (D, D):
            raise ValueError(f"C must have shape {(D, D)}, got {self.C.shape}")

    @classmethod
    def isotropic(cls, mean, sigma2: float = 0.1) -> GaussianPosterior:
        """N(mean, sigma2 * I)."""
        if sigma2 <= 0:
            raise ValueError(f"sigma2 must be positive, got {sigma2}")
        mean = jnp.asarray(mean, dtype=float)
        D = mean.shape[0] if mean.ndim == 1 else 0
        return cls(mean=mean, C=jnp.sqrt(sigma2) * jnp.eye(D))

    @classmethod
    def from_cov(cls, mean, cov) -> GaussianPosterior:
        """Build from a covariance matrix using its Cholesky factor as root."""
        mean = jnp.asarray(mean, dtype=float)
        cov = jnp.asarray(cov, dtype=float)
        return cls(mean=mean, C=jnp.linalg.cholesky(cov))

    @property
    def dim(self) -> int:
        return self.mean.shape[0]

    @property
    def cov(self) -> jnp.ndarray:
        return self.C @ self.C.T

    @property
    def var(self) -> jnp.ndarray:
        return jnp.sum(self.C ** 2, axis=1)

    @property
    def std(self) -> jnp.ndarray:
        return jnp.sqrt(self.var)

    def entropy(self) -> jnp.ndarray:
        """H[q] = D/2 log(2 pi e) + log|det C|."""
        _, logabsdet = jnp.linalg.slogdet(self.C)
        return 0.5 * self.dim * (1.0 + _LOG_2PI) + logabsdet

    def logpdf(self, x) -> jnp.ndarray:
        """
        Log-density at a single point (D,) or a batch of points (N, D).
        """
        x = jnp.asarray(x)
        diff = x - self.mean
        # Solve C w = diff instead of forming Sigma^{-1}
        w = jnp.linalg.solve(self.C, diff.T).T
        maha = jnp.sum(w ** 2, axis=-1)
        _, logabsdet = jnp.linalg.slogdet(self.C)
        return -0.5 * (self.dim * _LOG_2PI + maha) - logabsdet

    def pdf(self, x) -> jnp.ndarray:
        return jnp.exp(self.logpdf(x))

    def sample(self, key, n: int = 1) -> jnp.ndarray:
        """Draw (n, D) samples via the reparametrisation mean + C z."""
        z = jax.random.normal(key, (n, self.dim))
        return self.mean + z @ self.C.T

    def tree_flatten(self):
        return (self.mean, self.C), None

    @classmethod
    def tree_unflatten(cls, aux, children):
        mean, C = children
        return cls(mean=mean, C=C)
