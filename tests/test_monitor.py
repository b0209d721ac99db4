import numpy as np

from approxvi_jax.inference.monitor import CachedObjective, ELBOMonitor


def test_cached_objective_reuses_recent_points():
    calls = []

    def f(x):
        calls.append(x.copy())
        return float(np.sum(x))

    obj = CachedObjective(f, maxsize=2)
    a, b, c = np.array([1.0]), np.array([2.0]), np.array([3.0])
    assert obj(a) == 1.0
    assert obj(b) == 2.0
    assert obj(a) == 1.0
    assert obj.nfev == 2
    obj(c)  # evicts b, the least recently used point
    obj(b)
    assert obj.nfev == 4


def test_monitor_records_and_reports(capsys):
    test_values = iter([-1.0, -0.5, -0.8])
    monitor = ELBOMonitor(
        elbo=lambda x: float(x[0]),
        test_elbo=lambda x: next(test_values),
        show_every=2,
        test_every=2,
    )
    for i in range(1, 7):
        monitor(np.array([-10.0 + i]))

    assert monitor.elbo_trace == [-9.0, -8.0, -7.0, -6.0, -5.0, -4.0]
    assert monitor.test_iterations == [2, 4, 6]
    assert monitor.test_elbo_trace == [-1.0, -0.5, -0.8]

    lines = capsys.readouterr().out.splitlines()
    assert "Iteration 2: elbo = -8.0000" in lines
    assert "Iteration 4: test elbo = -0.5000" in lines
    # deteriorating test ELBO is highlighted in red
    assert "\033[31mIteration 6: test elbo = -0.8000\033[0m" in lines
    assert not any("Iteration 3" in line for line in lines)


def test_monitor_silent_by_default(capsys):
    monitor = ELBOMonitor(elbo=lambda x: 0.0)
    monitor(np.zeros(1))
    assert capsys.readouterr().out == ""
    assert monitor.test_elbo_trace == []
