"""API Package.

FastAPI server for HayQC.
"""

from api.server import create_app, app

__all__ = [
    "create_app",
    "app",
]
