"""
FastAPI routers for the roster app.

Each module exposes an APIRouter that ``roster.app.create_app`` includes.
"""
