"""
Quality Grade Classifier

Turns inspection measurements into a grade with an ordered rule list.
The first rule that matches wins; rule order decides overlaps, e.g. a
moisture of 31 matches both the D and the C rule and grades D.

Rules:
1. Mold, contamination or WET → REJECT
2. Dark green/green, moisture 10-14 inclusive, DRY → A
3. Moisture > 30 → D
4. Moisture > 25 → C
5. Light green/brown, moisture in (14, 25], or DAMP → B
6. Dark green/green and DRY with no moisture reading → A
7. Otherwise → B
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Union

from .models import (
    Color,
    Decision,
    Grade,
    GradeExplanation,
    Moisture,
    Wetness,
)


GREEN_COLORS = frozenset({Color.DARK_GREEN, Color.GREEN})
PALE_COLORS = frozenset({Color.LIGHT_GREEN, Color.BROWN})


@dataclass(frozen=True)
class Measurements:
    """Normalized classifier inputs."""
    moisture: Moisture
    color: Color
    wetness: Wetness
    mold: bool
    contamination: bool


@dataclass(frozen=True)
class GradeRule:
    """One entry of the ordered rule list."""
    grade: Grade
    reason: str
    matches: Callable[[Measurements], bool]


def _moisture_above(m: Measurements, limit: int) -> bool:
    return m.moisture is not None and m.moisture > limit


GRADE_RULES: List[GradeRule] = [
    GradeRule(
        Grade.REJECT,
        "Mold, contamination or wet bale",
        lambda m: m.mold or m.contamination or m.wetness == Wetness.WET,
    ),
    GradeRule(
        Grade.A,
        "Green, dry, moisture 10-14%",
        lambda m: (
            m.color in GREEN_COLORS
            and m.moisture is not None
            and 10 <= m.moisture <= 14
            and m.wetness == Wetness.DRY
        ),
    ),
    GradeRule(Grade.D, "Moisture above 30%", lambda m: _moisture_above(m, 30)),
    GradeRule(Grade.C, "Moisture above 25%", lambda m: _moisture_above(m, 25)),
    GradeRule(
        Grade.B,
        "Pale color, moisture 14-25% or damp",
        lambda m: (
            m.color in PALE_COLORS
            or (m.moisture is not None and 14 < m.moisture <= 25)
            or m.wetness == Wetness.DAMP
        ),
    ),
    GradeRule(
        Grade.A,
        "Green and dry, no moisture reading",
        lambda m: m.color in GREEN_COLORS and m.wetness == Wetness.DRY,
    ),
    GradeRule(Grade.B, "Default grade", lambda m: True),
]


def explain_grade(
    moisture_pct: Moisture,
    color: Union[Color, str],
    wetness: Union[Wetness, str],
    mold: bool,
    contamination: bool,
) -> GradeExplanation:
    """
    Grade a bale and report which rule fired.

    Args:
        moisture_pct: Moisture reading in percent, or None if not measured
        color: Bale color (enum member or its string value)
        wetness: Surface wetness (enum member or its string value)
        mold: Mold observed
        contamination: Contamination observed

    Returns:
        GradeExplanation with grade, rule number and reason

    Raises:
        ValueError: If color or wetness is not a known value, or the
            moisture reading is NaN
    """
    if moisture_pct is not None and math.isnan(moisture_pct):
        raise ValueError("Moisture reading is NaN")

    measurements = Measurements(
        moisture=moisture_pct,
        color=Color(color),
        wetness=Wetness(wetness),
        mold=bool(mold),
        contamination=bool(contamination),
    )

    for number, rule in enumerate(GRADE_RULES, start=1):
        if rule.matches(measurements):
            return GradeExplanation(grade=rule.grade, rule=number, reason=rule.reason)

    # Unreachable: the last rule always matches
    raise AssertionError("No grade rule matched")


def classify(
    moisture_pct: Moisture,
    color: Union[Color, str],
    wetness: Union[Wetness, str],
    mold: bool,
    contamination: bool,
) -> Grade:
    """Grade a bale from its inspection measurements."""
    return explain_grade(moisture_pct, color, wetness, mold, contamination).grade


def decision_allowed(grade: Union[Grade, str], decision: Union[Decision, str]) -> bool:
    """Whether an inspector decision is consistent with a grade.

    A REJECT grade only admits a REJECT decision. Any other grade admits
    either decision.
    """
    if Grade(grade) == Grade.REJECT:
        return Decision(decision) == Decision.REJECT
    return True
