"""
Posterior over Gaussian-process hyperparameters.

theta = (log lengthscale, log amplitude, log noise variance) under a flat
prior; the log-posterior is the GP log marginal likelihood with a
Matern 5/2 kernel. The Gaussian approximation over theta is then used to
average predictions over hyperparameter samples.
"""

import jax
import jax.numpy as jnp
import matplotlib.pyplot as plt

from approxvi_jax import vi

jax.config.update("jax_enable_x64", True)


def matern52(X, Z, lengthscale, variance):
    """
    Matérn ν=5/2:
        k(r) = σ^2 (1 + √5 r + 5/3 r^2) exp(-√5 r)
    """
    r2 = ((X[:, None] - Z[None, :]) / lengthscale) ** 2
    r = jnp.sqrt(r2 + 1e-12)
    s5r = jnp.sqrt(5.0) * r
    return variance * (1.0 + s5r + (5.0 / 3.0) * r2) * jnp.exp(-s5r)


def make_logp(x, y):
    def logp(theta):
        K = matern52(x, x, jnp.exp(theta[0]), jnp.exp(theta[1]))
        K = K + (jnp.exp(theta[2]) + 1e-8) * jnp.eye(x.shape[0])
        L = jnp.linalg.cholesky(K)
        alpha = jax.scipy.linalg.cho_solve((L, True), y)
        return (
            -0.5 * y @ alpha
            - jnp.sum(jnp.log(jnp.diag(L)))
            - 0.5 * x.shape[0] * jnp.log(2.0 * jnp.pi)
        )
    return logp


def predict(theta, x, y, xtest):
    ell, var, noise = jnp.exp(theta[0]), jnp.exp(theta[1]), jnp.exp(theta[2])
    K = matern52(x, x, ell, var) + noise * jnp.eye(x.shape[0])
    Ks = matern52(xtest, x, ell, var)
    return Ks @ jnp.linalg.solve(K, y)


def main():
    key_x, key_y, key_0, key_q = jax.random.split(jax.random.PRNGKey(0), 4)
    N, sigma = 25, 0.2
    x = jax.random.uniform(key_x, (N,)) * 10
    y = jnp.sin(x) + sigma * jax.random.normal(key_y, (N,))
    xtest = jnp.linspace(-1.0, 11.0, 121)

    logp = make_logp(x, y)
    q, logev = vi(logp, 2 * jax.random.normal(key_0, (3,)), S=300, iterations=1000,
                  show_every=50, gradientmode="forward")
    print(f"log evidence estimate: {logev:.4f}")
    print(f"posterior mean of log hyperparameters: {q.mean}")

    thetas = q.sample(key_q, 20)
    preds = jax.vmap(lambda t: predict(t, x, y, xtest))(thetas)

    plt.plot(xtest, jnp.sin(xtest), "k--", label="true")
    plt.plot(x, y, "ko", label="data")
    plt.plot(xtest, preds.T, "b-", alpha=0.2)
    plt.legend()
    plt.show()


if __name__ == "__main__":
    main()
