"""Health check endpoints."""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from api.dependencies import get_db_path


router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]


def _database_status(db_path: Path) -> str:
    try:
        conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
        try:
            conn.execute("SELECT 1 FROM purchase_order LIMIT 1")
        finally:
            conn.close()
    except sqlite3.Error:
        return "down"
    return "up"


@router.get("/health", response_model=HealthResponse)
async def health_check(db_path: Path = Depends(get_db_path)) -> HealthResponse:
    """Health check endpoint."""
    database = _database_status(db_path)
    return HealthResponse(
        status="healthy" if database == "up" else "degraded",
        timestamp=datetime.utcnow().isoformat(),
        version="1.0.0",
        services={
            "api": "up",
            "database": database,
        }
    )


@router.get("/live")
async def liveness_check(response: Response) -> Dict[str, str]:
    """Liveness probe for Kubernetes."""
    return {"status": "alive"}
