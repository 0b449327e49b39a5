"""
Core utilities shared across the portfolio site.

This package hosts configuration helpers (env vars, paths), logging setup and
small URL helpers. Routers and services depend on these primitives instead of
reading os.environ directly.
"""
