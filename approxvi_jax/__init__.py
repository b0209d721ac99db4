# approxvi_jax/__init__.py
"""
approxvi-jax: Gaussian variational inference from a finite sample of
reparametrised latents.

The posterior is approximated with a full-covariance Gaussian by maximising
the ELBO over a set of latent samples drawn once and kept fixed, which makes
the objective deterministic and lets L-BFGS or Nelder-Mead do the
optimisation without learning-rate tuning.
"""
from .core import GaussianPosterior
from .inference import FixedSampleVI, VICFG, VIRun
from .api import vi, vi_diag, vi_run
from .problems import example_problem_1, gaussian_problem

__version__ = "0.1.0"

__all__ = [
    "GaussianPosterior",
    "FixedSampleVI",
    "VICFG",
    "VIRun",
    "vi",
    "vi_diag",
    "vi_run",
    "example_problem_1",
    "gaussian_problem",
]
