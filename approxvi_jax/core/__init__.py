# approxvi_jax/core/__init__.py
from .gaussian import GaussianPosterior

__all__ = [
    "GaussianPosterior",
]
