def test_imports():
    import approxvi_jax

    from approxvi_jax import vi, vi_diag, vi_run, example_problem_1, gaussian_problem
    from approxvi_jax.core import GaussianPosterior
    from approxvi_jax.energy import LogDensity, elbo_fs, elbo_fs_grad
    from approxvi_jax.inference import FixedSampleVI, VICFG, VIRun, InferenceMethod
    from approxvi_jax.docs import SearchRecord, loads, dumps, build_search_index

    assert isinstance(FixedSampleVI(), InferenceMethod)
    assert isinstance(example_problem_1(), LogDensity)
    assert approxvi_jax.__version__
