"""
Grading Package

Deterministic bale quality grading from inspection measurements.

Usage:
    from grading import classify, Color, Wetness

    grade = classify(12, Color.DARK_GREEN, Wetness.DRY, mold=False, contamination=False)
"""

from .models import (
    Color,
    Wetness,
    Stems,
    Grade,
    Decision,
    GradeExplanation,
)

from .classifier import (
    GRADE_RULES,
    classify,
    explain_grade,
    decision_allowed,
)

__all__ = [
    # Enums
    "Color",
    "Wetness",
    "Stems",
    "Grade",
    "Decision",
    "GradeExplanation",

    # Classifier
    "GRADE_RULES",
    "classify",
    "explain_grade",
    "decision_allowed",
]
