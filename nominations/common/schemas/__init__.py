"""
Nomination Schemas

Submission and Insights models shared by the intake pipeline.
"""

from .nomination import (
    Submission,
    Insights,
    MAX_FIELD_LENGTH,
    PRIORITY_MIN,
    PRIORITY_MAX,
)

__all__ = [
    "Submission",
    "Insights",
    "MAX_FIELD_LENGTH",
    "PRIORITY_MIN",
    "PRIORITY_MAX",
]
