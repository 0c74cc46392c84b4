"""
Core module containing the domain model: entities, enums and exceptions.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "AbstractEntity",
    "Student",
    "Course",
    "Registration",
    "GradeRecord",
    "Event",

    # Interfaces
    "EventHandler",

    # Enums
    "StudentStatus",
    "CourseType",
    "Semester",
    "GradeValue",
    "Faculty",
    "EventType",
    "coerce_enum",

    # Exceptions
    "RecordsException",
    "NotFoundError",
    "InvalidStateError",
    "FacultyMismatchError",
    "CapacityExceededError",
    "DuplicateRegistrationError",
    "NotRegisteredError",
    "TerminalStateError",
    "ValidationError",
    "ConfigurationError",
]
