"""Grade preview endpoint.

Returns the grade the server will record for a set of measurements, so
inspection clients show the same grade the server stores.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from access import Principal
from api.dependencies import get_principal
from grading import Color, GradeExplanation, Wetness, explain_grade


router = APIRouter()


class GradePreviewRequest(BaseModel):
    """Measurements to grade."""
    moisture_pct: Optional[float] = Field(None, ge=0, le=100, description="Moisture reading")
    color: Color
    wetness: Wetness
    mold: bool = False
    contamination: bool = False


@router.post("/preview", response_model=GradeExplanation)
def preview_grade(
    request: GradePreviewRequest,
    principal: Principal = Depends(get_principal),
) -> GradeExplanation:
    """Grade measurements without storing anything."""
    return explain_grade(
        request.moisture_pct,
        request.color,
        request.wetness,
        request.mold,
        request.contamination,
    )
