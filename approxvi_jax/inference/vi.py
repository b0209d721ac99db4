# approxvi_jax/inference/vi.py
"""
Variational inference with a fixed set of reparametrised samples.

The latents Z = [z_1, ..., z_S] are drawn once at the start and kept fixed
throughout the optimisation of

    L_FS(mu, C, Z) = 1/S sum_s log p(D, mu + C z_s) + H[q].

Optionally a second, independent set Z' of size Stest is drawn and the bound
L_FS(mu, C, Z') is monitored every `test_every` iterations to detect
over-adaptation of (mu, C) to Z.
"""
from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any, Callable, Optional

import jax
import jax.numpy as jnp
import numpy as np
from scipy.optimize import approx_fprime

from ..core.gaussian import GaussianPosterior
from ..energy.base import LogDensity
from ..energy import elbo as E
from .base import InferenceMethod
from .monitor import CachedObjective, ELBOMonitor
from . import optimisers

GRADIENT_MODES = ("gradientfree", "forward", "reverse", "provided")
COVARIANCES = ("full", "diag")


@dataclass(frozen=True)
class VICFG:
    """Configuration for fixed-sample VI."""
    S: int = 100
    iterations: int = 1
    sigma2: float = 0.1
    gradientmode: Optional[str] = None  # None -> "gradientfree"
    optimizer: str = "lbfgs"  # gradient modes only: "lbfgs", "adam", "sgd", "rmsprop"
    lr: float = 1e-2  # optax optimisers only
    covariance: str = "full"
    # Held-out monitoring: Stest test latents, evaluated every test_every iterations
    Stest: int = 0
    test_every: int = -1
    show_every: int = -1
    seed: int = 1
    vectorise: bool = True
    numerical_verification: bool = False
    verbose: bool = False

    def validate(self, has_grad_logp: bool = False) -> None:
        if self.S < 1:
            raise ValueError(f"S must be a positive number of samples, got {self.S}")
        if self.iterations < 1:
            raise ValueError(f"iterations must be positive, got {self.iterations}")
        if self.sigma2 <= 0:
            raise ValueError(f"sigma2 must be positive, got {self.sigma2}")
        if self.gradientmode is not None and self.gradientmode not in GRADIENT_MODES:
            raise ValueError(
                f"Unknown gradientmode: {self.gradientmode}. Use one of {GRADIENT_MODES}"
            )
        if self.optimizer not in optimisers.GRADIENT_OPTIMIZERS:
            raise ValueError(f"Unknown optimizer: {self.optimizer}")
        if self.covariance not in COVARIANCES:
            raise ValueError(f"Unknown covariance: {self.covariance}. Use 'full' or 'diag'")
        if self.Stest < 0:
            raise ValueError(f"Stest must be non-negative, got {self.Stest}")
        if self.Stest > 0 and self.test_every < 1:
            raise ValueError("Whenever Stest is set, test_every must be set too")

        mode = self.mode
        if mode == "provided" and not has_grad_logp:
            raise ValueError("gradientmode='provided' requires grad_logp")
        if has_grad_logp and mode != "provided":
            raise ValueError(
                "grad_logp was given but gradientmode is not 'provided'; "
                "set gradientmode='provided' to use it"
            )
        if mode == "gradientfree" and self.optimizer != "lbfgs":
            raise ValueError(
                f"optimizer={self.optimizer!r} needs a gradient; "
                "choose gradientmode 'forward', 'reverse' or 'provided'"
            )

    @property
    def mode(self) -> str:
        return "gradientfree" if self.gradientmode is None else self.gradientmode


@dataclass
class VIRun:
    """Fixed-sample VI results."""
    q: GaussianPosterior
    logev: float  # L_FS at the optimum, estimate of the log evidence
    elbo_trace: np.ndarray  # shape [iterations run]
    test_iterations: np.ndarray  # iterations at which the test ELBO was evaluated
    test_elbo_trace: np.ndarray
    samples: jnp.ndarray  # Z, (S, D)
    test_samples: Optional[jnp.ndarray]  # Z', (Stest, D) or None
    message: str = ""
    nit: int = 0  # optimiser iterations performed

    @property
    def test_logev(self) -> Optional[float]:
        """Most recent test ELBO, if monitoring was enabled."""
        if len(self.test_elbo_trace) == 0:
            return None
        return float(self.test_elbo_trace[-1])

    def overfitting(self) -> bool:
        """
        True when, over the second half of the test evaluations, the test
        ELBO trends down while the training ELBO trends up.
        """
        n = len(self.test_elbo_trace)
        if n < 4:
            return False
        its = self.test_iterations[n // 2:]
        test = self.test_elbo_trace[n // 2:]
        train = self.elbo_trace[its - 1]
        test_slope = np.polyfit(its, test, 1)[0]
        train_slope = np.polyfit(its, train, 1)[0]
        return bool(test_slope < 0 and train_slope > 0)


class FixedSampleVI(InferenceMethod):
    """
    Gaussian variational inference with fixed reparametrisation samples.

    Examples:
        >>> logp = lambda x: -jnp.sum(x * x) / 2
        >>> method = FixedSampleVI(VICFG(S=200, iterations=30, gradientmode="forward"))
        >>> out = method.run(logp, jnp.zeros(5))
        >>> out.q.mean, out.q.cov, out.logev
    """

    def __init__(self, cfg: VICFG = VICFG()):
        self.cfg = cfg

    def _initial(self, init) -> GaussianPosterior:
        if isinstance(init, GaussianPosterior):
            return init
        mean = jnp.asarray(init, dtype=float)
        if mean.ndim != 1:
            raise ValueError(f"Initial mean must be one-dimensional, got shape {mean.shape}")
        return GaussianPosterior.isotropic(mean, self.cfg.sigma2)

    def run(
        self,
        logp: LogDensity,
        init: Any,
        *,
        grad_logp: Optional[Callable] = None,
    ) -> VIRun:
        """
        Maximise the finite-sample ELBO.

        Args:
            logp: unnormalised log-posterior theta (D,) -> scalar
            init: initial mean (D,) or an initial GaussianPosterior
            grad_logp: gradient of logp, used when gradientmode="provided"

        Returns:
            VIRun with the Gaussian approximation, the log-evidence estimate
            and the ELBO traces
        """
        cfg = self.cfg
        cfg.validate(has_grad_logp=grad_logp is not None)
        mode = cfg.mode
        diag = cfg.covariance == "diag"

        q0 = self._initial(init)
        D = q0.dim

        key = jax.random.PRNGKey(cfg.seed)
        key_train, key_test = jax.random.split(key)
        Z = E.draw_latents(key_train, cfg.S, D)
        Ztest = E.draw_latents(key_test, cfg.Stest, D) if cfg.Stest > 0 else None

        if diag:
            x0 = E.pack_diag(q0.mean, q0.std)
        else:
            x0 = E.pack(q0.mean, q0.C)

        elbo_on = _make_elbo(logp, D, diag, cfg.vectorise)
        elbo_train = elbo_on(Z)
        grad_train = _make_grad(mode, elbo_train, grad_logp, Z, D, diag, cfg.vectorise)

        neg_elbo = CachedObjective(lambda x: -float(elbo_train(jnp.asarray(x))), maxsize=len(x0) + 2)

        def neg_elbo_and_grad(x):
            x = np.asarray(x, dtype=float)
            g = -np.asarray(grad_train(jnp.asarray(x)), dtype=float)
            return neg_elbo(x), g

        if cfg.numerical_verification and grad_train is not None:
            _verify_gradient(lambda x: -neg_elbo(x), grad_train, np.asarray(x0, dtype=float))

        test_fn = None
        if Ztest is not None:
            elbo_test = elbo_on(Ztest)
            test_fn = lambda x: float(elbo_test(jnp.asarray(x)))

        monitor = ELBOMonitor(
            elbo=lambda x: -neg_elbo(x),
            test_elbo=test_fn,
            show_every=cfg.show_every,
            test_every=cfg.test_every,
        )

        if mode == "gradientfree":
            res = optimisers.nelder_mead(neg_elbo, x0, cfg.iterations, callback=monitor)
        elif cfg.optimizer == "lbfgs":
            res = optimisers.lbfgs(neg_elbo_and_grad, x0, cfg.iterations, callback=monitor)
        else:
            res = optimisers.first_order(
                neg_elbo_and_grad,
                x0,
                cfg.iterations,
                optimizer=cfg.optimizer,
                lr=cfg.lr,
                callback=monitor,
                verbose=cfg.verbose,
            )

        x = jnp.asarray(res.x)
        if diag:
            mean, c = E.unpack_diag(x, D)
            q = GaussianPosterior(mean=mean, C=jnp.diag(c))
        else:
            mean, C = E.unpack(x, D)
            q = GaussianPosterior(mean=mean, C=C)

        return VIRun(
            q=q,
            logev=-neg_elbo(res.x),
            elbo_trace=np.asarray(monitor.elbo_trace, dtype=float),
            test_iterations=np.asarray(monitor.test_iterations, dtype=int),
            test_elbo_trace=np.asarray(monitor.test_elbo_trace, dtype=float),
            samples=Z,
            test_samples=Ztest,
            message=res.message,
            nit=res.nit,
        )


def _make_elbo(logp, D: int, diag: bool, vectorise: bool):
    """Returns Z -> (x -> L_FS(x, Z)) on the packed parameter vector."""

    def elbo_on(Z):
        if diag:
            def f(x):
                mean, c = E.unpack_diag(x, D)
                return E.elbo_fs_diag(logp, mean, c, Z, vectorise)
        else:
            def f(x):
                mean, C = E.unpack(x, D)
                return E.elbo_fs(logp, mean, C, Z, vectorise)
        # Per-sample evaluation may call non-JAX code, so only jit the vmapped path
        return jax.jit(f) if vectorise else f

    return elbo_on


def _make_grad(mode: str, elbo_fn, grad_logp, Z, D: int, diag: bool, vectorise: bool):
    if mode == "gradientfree":
        return None
    if mode == "forward":
        g = jax.jacfwd(elbo_fn)
        return jax.jit(g) if vectorise else g
    if mode == "reverse":
        g = jax.grad(elbo_fn)
        return jax.jit(g) if vectorise else g

    if diag:
        def provided(x):
            mean, c = E.unpack_diag(x, D)
            return E.pack_diag(*E.elbo_fs_grad_diag(grad_logp, mean, c, Z, vectorise))
    else:
        def provided(x):
            mean, C = E.unpack(x, D)
            return E.pack(*E.elbo_fs_grad(grad_logp, mean, C, Z, vectorise))
    return provided


def _verify_gradient(elbo_fn, grad_fn, x0: np.ndarray) -> bool:
    """Compare the ELBO gradient with forward finite differences at x0."""
    # Step and tolerance follow the working precision (float32 unless x64 is enabled)
    root_eps = float(np.sqrt(np.finfo(jnp.asarray(0.0).dtype).eps))
    eps = root_eps * max(1.0, float(np.max(np.abs(x0))))
    rtol = atol = max(1e-4, 30.0 * root_eps)
    numerical = approx_fprime(x0, elbo_fn, eps)
    analytic = np.asarray(grad_fn(jnp.asarray(x0)), dtype=float)
    discrepancy = float(np.max(np.abs(numerical - analytic)))
    print(f"Gradient verification: max abs discrepancy = {discrepancy:.3e}")
    ok = bool(np.allclose(analytic, numerical, rtol=rtol, atol=atol))
    if not ok:
        warnings.warn(
            f"Provided gradient disagrees with finite differences "
            f"(max abs discrepancy {discrepancy:.3e})"
        )
    return ok
