"""Command-line surface for prthreads."""
