"""
Gaussian approximation of the synthetic two-dimensional problem.

Plots the target posterior (filled blue contours) and the Gaussian
approximation q (red contours) on top.
"""

import jax
import jax.numpy as jnp
import matplotlib.pyplot as plt

from approxvi_jax import vi, example_problem_1

jax.config.update("jax_enable_x64", True)


def main():
    logp = example_problem_1()
    x0 = jax.random.normal(jax.random.PRNGKey(0), (2,))
    q, logev = vi(logp, x0, S=100, iterations=10_000, show_every=500)
    print(f"log evidence estimate: {logev:.4f}")

    xs = jnp.linspace(-3, 3, 301)
    X1, X2 = jnp.meshgrid(xs, xs)
    grid = jnp.stack([X1.ravel(), X2.ravel()], axis=-1)
    target = jnp.exp(jax.vmap(logp)(grid)).reshape(X1.shape)
    approx = q.pdf(grid).reshape(X1.shape)

    fig, ax = plt.subplots(figsize=(5, 5))
    ax.contourf(X1, X2, target, cmap="Blues")
    ax.contour(X1, X2, approx, colors="red", alpha=0.4)
    ax.set_title("exampleproblem1: target (blue) vs q (red)")
    plt.show()


if __name__ == "__main__":
    main()
