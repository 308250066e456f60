"""
Grading Models

Defines the closed sets recorded during a bale inspection and the grade
result types.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


Moisture = Optional[Union[int, float, Decimal]]


class Color(str, Enum):
    """Bale color, darkest first."""
    DARK_GREEN = "DARK_GREEN"
    GREEN = "GREEN"
    LIGHT_GREEN = "LIGHT_GREEN"
    BROWN = "BROWN"


class Wetness(str, Enum):
    """Surface wetness observed by the inspector."""
    DRY = "DRY"
    DAMP = "DAMP"
    WET = "WET"


class Stems(str, Enum):
    """Stem content."""
    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"


class Grade(str, Enum):
    """Quality grade."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    REJECT = "REJECT"


class Decision(str, Enum):
    """Inspector decision for a bale."""
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


class GradeExplanation(BaseModel):
    """A grade together with the rule that produced it."""
    grade: Grade
    rule: int = Field(..., description="1-based number of the rule that fired")
    reason: str = Field(..., description="Human-readable rule description")
