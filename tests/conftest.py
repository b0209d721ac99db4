import jax

# Quasi-Newton convergence checks below compare against closed-form optima
jax.config.update("jax_enable_x64", True)
