"""
Enumerations for the university records domain.
"""

from enum import Enum

from .exceptions import ValidationError


class StudentStatus(Enum):
    """Lifecycle status of a student."""
    ACTIVE = "active"
    ACADEMIC_LEAVE = "academic_leave"
    GRADUATED = "graduated"
    EXPELLED = "expelled"

    @property
    def is_terminal(self) -> bool:
        """Graduated and expelled students never change status again."""
        return self in (StudentStatus.GRADUATED, StudentStatus.EXPELLED)


class CourseType(Enum):
    """Kinds of courses offered."""
    MANDATORY = "mandatory"
    OPTIONAL = "optional"
    SPECIAL = "special"


class Semester(Enum):
    """Academic semesters."""
    FIRST = "first"
    SECOND = "second"


class GradeValue(Enum):
    """Ordinal grades on the 2-5 scale."""
    EXCELLENT = 5
    GOOD = 4
    SATISFACTORY = 3
    UNSATISFACTORY = 2

    @classmethod
    def max_value(cls) -> "GradeValue":
        """Get the highest grade."""
        return max(cls, key=lambda grade: grade.value)


class Faculty(Enum):
    """Organizational divisions of the university."""
    COMPUTER_SCIENCE = "computer_science"
    ECONOMICS = "economics"
    LAW = "law"
    ENGINEERING = "engineering"


class EventType(Enum):
    """Types of events published by the record store."""
    STUDENT_ENROLLED = "student_enrolled"
    COURSE_ADDED = "course_added"
    REGISTRATION = "registration"
    GRADING = "grading"
    STATUS_CHANGE = "status_change"


def coerce_enum(enum_cls, value):
    """Resolve an enum member from a member, a member name or a member value."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str) and value.upper() in enum_cls.__members__:
        return enum_cls[value.upper()]
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(enum_cls.__members__)
        raise ValidationError(
            f"Invalid {enum_cls.__name__}: {value!r} (expected one of {allowed})",
            details={'field': enum_cls.__name__, 'value': value}
        )
