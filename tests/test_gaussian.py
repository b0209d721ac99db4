import jax
import jax.numpy as jnp
import numpy as np
import pytest
from scipy.stats import multivariate_normal

from approxvi_jax.core import GaussianPosterior


def _q():
    mean = jnp.array([0.5, -1.0, 2.0])
    C = jnp.array([[1.0, 0.0, 0.0], [0.3, 0.7, 0.0], [-0.2, 0.1, 0.4]])
    return GaussianPosterior(mean=mean, C=C)


def test_logpdf_and_entropy_match_scipy():
    q = _q()
    ref = multivariate_normal(mean=np.asarray(q.mean), cov=np.asarray(q.cov))
    x = jnp.array([[0.0, 0.0, 0.0], [1.0, -2.0, 2.5]])

    np.testing.assert_allclose(q.logpdf(x), ref.logpdf(np.asarray(x)), rtol=1e-8)
    np.testing.assert_allclose(q.logpdf(x[1]), ref.logpdf(np.asarray(x[1])), rtol=1e-8)
    np.testing.assert_allclose(q.pdf(x[0]), ref.pdf(np.asarray(x[0])), rtol=1e-8)
    np.testing.assert_allclose(q.entropy(), ref.entropy(), rtol=1e-8)


def test_entropy_ignores_orientation_of_root():
    q = _q()
    R = jnp.array([[0.0, 1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    q_rot = GaussianPosterior(mean=q.mean, C=q.C @ R)
    np.testing.assert_allclose(q_rot.cov, q.cov, atol=1e-12)
    np.testing.assert_allclose(q_rot.entropy(), q.entropy(), atol=1e-12)
    np.testing.assert_allclose(q_rot.var, jnp.diag(q.cov), atol=1e-12)


def test_constructors():
    q = GaussianPosterior.isotropic(jnp.zeros(4), sigma2=0.25)
    np.testing.assert_allclose(q.cov, 0.25 * jnp.eye(4))
    assert q.dim == 4

    cov = jnp.array([[2.0, 0.5], [0.5, 1.0]])
    q = GaussianPosterior.from_cov(jnp.ones(2), cov)
    np.testing.assert_allclose(q.cov, cov, atol=1e-12)

    with pytest.raises(ValueError):
        GaussianPosterior.isotropic(jnp.zeros(2), sigma2=0.0)
    with pytest.raises(ValueError):
        GaussianPosterior(mean=jnp.zeros(3), C=jnp.eye(2))
    with pytest.raises(ValueError):
        GaussianPosterior(mean=jnp.zeros((2, 2)), C=jnp.eye(2))


def test_sample_moments():
    q = _q()
    xs = q.sample(jax.random.PRNGKey(0), 20000)
    assert xs.shape == (20000, 3)
    np.testing.assert_allclose(jnp.mean(xs, axis=0), q.mean, atol=0.05)
    np.testing.assert_allclose(jnp.cov(xs.T), q.cov, atol=0.05)


def test_pytree():
    q = _q()
    leaves = jax.tree_util.tree_leaves(q)
    assert len(leaves) == 2
    doubled = jax.tree_util.tree_map(lambda x: 2 * x, q)
    assert isinstance(doubled, GaussianPosterior)
    np.testing.assert_allclose(doubled.mean, 2 * q.mean)

    mean_of = jax.jit(lambda q: q.mean.sum())
    assert float(mean_of(q)) == pytest.approx(1.5)
