"""
High-level use cases for the portfolio site.

Each service module orchestrates adapters to implement the site's behaviour
(talk to the shortener backend, drive the link form, load page content).
Routers (FastAPI endpoints) call these services instead of reaching the
backend directly.
"""
