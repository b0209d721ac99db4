# approxvi_jax/inference/monitor.py
"""
Per-iteration bookkeeping for fixed-sample VI.

The monitor records the training ELBO at every iteration and, every
`test_every` iterations, the ELBO on an independent set of test latents Z'.
Z' never enters the optimisation: if the training ELBO keeps rising while
the test ELBO falls, the variational parameters are over-adapting to the
training latents and a larger S is needed.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Callable, List, Optional

import numpy as np

_RED = "\033[31m"
_RESET = "\033[0m"


class CachedObjective:
    """
    Wraps a scalar function of a flat parameter vector and remembers the most
    recent `maxsize` evaluations, so the monitor does not re-evaluate points
    the optimiser has already visited.
    """

    def __init__(self, fn: Callable[[np.ndarray], float], maxsize: int = 8):
        self.fn = fn
        self.maxsize = max(1, maxsize)
        self._cache: OrderedDict = OrderedDict()
        self.nfev = 0

    def __call__(self, x: np.ndarray) -> float:
        x = np.asarray(x, dtype=float)
        key = x.tobytes()
        if key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]
        value = float(self.fn(x))
        self.nfev += 1
        self.remember(x, value)
        return value

    def remember(self, x: np.ndarray, value: float) -> None:
        self._cache[np.asarray(x, dtype=float).tobytes()] = value
        if len(self._cache) > self.maxsize:
            self._cache.popitem(last=False)


class ELBOMonitor:
    """
    Records training/test ELBO traces and prints progress.

    elbo:       x -> ELBO on the training latents Z
    test_elbo:  x -> ELBO on the test latents Z' (None disables testing)
    """

    def __init__(
        self,
        elbo: Callable[[np.ndarray], float],
        test_elbo: Optional[Callable[[np.ndarray], float]] = None,
        show_every: int = -1,
        test_every: int = -1,
    ):
        self.elbo = elbo
        self.test_elbo = test_elbo
        self.show_every = show_every
        self.test_every = test_every
        self.iteration = 0
        self.elbo_trace: List[float] = []
        self.test_iterations: List[int] = []
        self.test_elbo_trace: List[float] = []

    def __call__(self, x: np.ndarray) -> None:
        self.iteration += 1
        i = self.iteration
        value = self.elbo(x)
        self.elbo_trace.append(value)

        if self.show_every >= 1 and i % self.show_every == 0:
            print(f"Iteration {i}: elbo = {value:.4f}")

        if self.test_elbo is not None and self.test_every >= 1 and i % self.test_every == 0:
            test_value = float(self.test_elbo(x))
            deteriorated = bool(self.test_elbo_trace) and test_value < self.test_elbo_trace[-1]
            self.test_iterations.append(i)
            self.test_elbo_trace.append(test_value)
            line = f"Iteration {i}: test elbo = {test_value:.4f}"
            print(f"{_RED}{line}{_RESET}" if deteriorated else line)
