"""
App assembly entry point.

Re-exports the FastAPI `app` from `postboard.api.main` so servers can be
pointed at `app:app`.
"""

from postboard.api.main import app  # noqa: F401
