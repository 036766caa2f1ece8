"""Restaurant order-taking backend."""
