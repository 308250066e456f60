"""API Routes Package."""

from api.routes import health, access, grading, hierarchy, bales, assignments, notes, users

__all__ = [
    "health",
    "access",
    "grading",
    "hierarchy",
    "bales",
    "assignments",
    "notes",
    "users",
]
