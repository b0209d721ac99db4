# approxvi_jax/api.py
"""
Entry points: log-posterior + initial point -> Gaussian approximation.

`vi` is the minimal-requirements interface: the user codes the unnormalised
log-posterior, picks an initial mean and calls

    q, logev = vi(logp, x0, S=200, iterations=10_000, show_every=200)

All keyword options map one-to-one onto `VICFG` fields; unknown options
raise TypeError.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from .core.gaussian import GaussianPosterior
from .inference.vi import FixedSampleVI, VICFG, VIRun


def vi_run(
    logp: Callable,
    init: Any,
    sigma2: float = 0.1,
    *,
    grad_logp: Optional[Callable] = None,
    **options,
) -> VIRun:
    """
    Run fixed-sample VI and return the full VIRun (traces, samples, message).

    Args:
        logp: unnormalised log-posterior theta (D,) -> scalar
        init: initial mean (D,) or an initial GaussianPosterior
        sigma2: initial covariance is sigma2 * I (ignored for a GaussianPosterior init)
        grad_logp: gradient of logp; requires gradientmode="provided"
        **options: VICFG fields (S, iterations, gradientmode, Stest, test_every, ...)
    """
    cfg = VICFG(sigma2=sigma2, **options)
    return FixedSampleVI(cfg).run(logp, init, grad_logp=grad_logp)


def vi(
    logp: Callable,
    init: Any,
    sigma2: float = 0.1,
    *,
    grad_logp: Optional[Callable] = None,
    **options,
) -> Tuple[GaussianPosterior, float]:
    """
    Returns the approximate Gaussian posterior and the log-evidence estimate.

    Arguments:
        logp: the (unnormalised) log-posterior, i.e. the joint log-likelihood
        init: initial mean of the approximating Gaussian posterior
        sigma2: initial covariance sigma2 * I. Default value is 0.1.
        S: number of drawn samples that approximate the lower bound integral
        iterations: for how many iterations to run optimisation on the lower bound
        show_every: report progress every show_every iterations; values
            smaller than 1 disable reporting
        gradientmode: "gradientfree" (Nelder-Mead, the default), "forward" or
            "reverse" (JAX autodiff + L-BFGS), "provided" (grad_logp + L-BFGS)
        grad_logp: gradient of logp, used only with gradientmode="provided"
        Stest: number of test samples on which the ELBO is evaluated, never optimised
        test_every: evaluate the test ELBO every test_every iterations;
            required whenever Stest is set
        seed: PRNG seed for the training and test samples

    Example:
        >>> logp = example_problem_1()
        >>> q, logev = vi(logp, jnp.zeros(2), S=100, iterations=10_000, show_every=50)
    """
    out = vi_run(logp, init, sigma2, grad_logp=grad_logp, **options)
    return out.q, out.logev


def vi_diag(
    logp: Callable,
    init: Any,
    sigma2: float = 0.1,
    *,
    grad_logp: Optional[Callable] = None,
    **options,
) -> Tuple[GaussianPosterior, float]:
    """Same as `vi` with a diagonal covariance approximation."""
    if options.get("covariance", "diag") != "diag":
        raise ValueError("vi_diag always uses covariance='diag'")
    options["covariance"] = "diag"
    out = vi_run(logp, init, sigma2, grad_logp=grad_logp, **options)
    return out.q, out.logev
