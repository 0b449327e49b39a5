"""
FastAPI routers grouped by page/feature (home, shortener).

Each file inside this package exposes an APIRouter that is included in the
main application (app.py).
"""
