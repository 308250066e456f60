"""Core module - configuration and observability shared by every package.

Domain logic lives in access/ (tenant scoping), grading/ (bale grades)
and qc/ (QC workflows). This package holds only the ambient pieces they
all use.
"""

__version__ = "1.0.0"
