"""Database models package."""

from institute_api.models.student import Student

__all__ = [
    # Student
    "Student",
]
