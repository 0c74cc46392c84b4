"""
Core entities for the university records domain.
"""

import uuid
from abc import ABC
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict

from .enums import StudentStatus, CourseType, Semester, GradeValue, Faculty, EventType
from .exceptions import TerminalStateError


class AbstractEntity(ABC):
    """Base abstract entity with store-assigned ID, lifecycle timestamps and versioning."""

    def __init__(self, entity_id: int):
        self._id = entity_id
        self._created_at = datetime.now(timezone.utc)
        self._updated_at = self._created_at
        self._version = 1

    @property
    def id(self) -> int:
        """Get the entity ID."""
        return self._id

    @property
    def created_at(self) -> datetime:
        """Get creation timestamp."""
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        """Get last update timestamp."""
        return self._updated_at

    @property
    def version(self) -> int:
        """Get current version."""
        return self._version

    def touch(self) -> None:
        """Record a modification."""
        self._updated_at = datetime.now(timezone.utc)
        self._version += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to dictionary."""
        return {
            'id': self._id,
            'created_at': self._created_at.isoformat(),
            'updated_at': self._updated_at.isoformat(),
            'version': self._version,
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id}, version={self._version})"


class Student(AbstractEntity):
    """Student entity. Only the status may change after creation."""

    def __init__(self, entity_id: int, full_name: str, faculty: Faculty, year: int,
                 status: StudentStatus, enrollment_date: date, group_number: str):
        super().__init__(entity_id)
        self._full_name = full_name
        self._faculty = faculty
        self._year = year
        self._status = status
        self._enrollment_date = enrollment_date
        self._group_number = group_number

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def faculty(self) -> Faculty:
        return self._faculty

    @property
    def year(self) -> int:
        return self._year

    @property
    def status(self) -> StudentStatus:
        return self._status

    @property
    def enrollment_date(self) -> date:
        return self._enrollment_date

    @property
    def group_number(self) -> str:
        return self._group_number

    @property
    def is_active(self) -> bool:
        return self._status == StudentStatus.ACTIVE

    def change_status(self, new_status: StudentStatus) -> None:
        """Move the student to a new status.

        Graduated and expelled are terminal: the only change accepted from
        them is re-asserting the same status, which leaves the student as is.
        """
        if self._status.is_terminal and new_status != self._status:
            raise TerminalStateError(
                f"Cannot change status of a {self._status.value} student",
                details={'student_id': self._id,
                         'current_status': self._status.value,
                         'requested_status': new_status.value}
            )
        if new_status == self._status:
            return
        self._status = new_status
        self.touch()

    def to_dict(self) -> Dict[str, Any]:
        """Convert student to dictionary."""
        base_dict = super().to_dict()
        base_dict.update({
            'full_name': self._full_name,
            'faculty': self._faculty.name,
            'year': self._year,
            'status': self._status.name,
            'enrollment_date': self._enrollment_date.isoformat(),
            'group_number': self._group_number,
        })
        return base_dict


class Course(AbstractEntity):
    """Course entity. Immutable after creation."""

    def __init__(self, entity_id: int, name: str, course_type: CourseType, credits: int,
                 semester: Semester, faculty: Faculty, max_students: int):
        super().__init__(entity_id)
        self._name = name
        self._course_type = course_type
        self._credits = credits
        self._semester = semester
        self._faculty = faculty
        self._max_students = max_students

    @property
    def name(self) -> str:
        return self._name

    @property
    def course_type(self) -> CourseType:
        return self._course_type

    @property
    def credits(self) -> int:
        return self._credits

    @property
    def semester(self) -> Semester:
        return self._semester

    @property
    def faculty(self) -> Faculty:
        return self._faculty

    @property
    def max_students(self) -> int:
        return self._max_students

    def to_dict(self) -> Dict[str, Any]:
        """Convert course to dictionary."""
        base_dict = super().to_dict()
        base_dict.update({
            'name': self._name,
            'course_type': self._course_type.name,
            'credits': self._credits,
            'semester': self._semester.name,
            'faculty': self._faculty.name,
            'max_students': self._max_students,
        })
        return base_dict


@dataclass(frozen=True)
class Registration:
    """Link between a student and a course."""
    student_id: int
    course_id: int

    @property
    def key(self):
        return (self.student_id, self.course_id)

    def to_dict(self) -> Dict[str, Any]:
        return {'student_id': self.student_id, 'course_id': self.course_id}


@dataclass(frozen=True)
class GradeRecord:
    """Immutable value object holding the current grade for a registration."""
    student_id: int
    course_id: int
    grade: GradeValue
    date: datetime
    semester: Semester

    @property
    def key(self):
        return (self.student_id, self.course_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'student_id': self.student_id,
            'course_id': self.course_id,
            'grade': self.grade.name,
            'value': self.grade.value,
            'date': self.date.isoformat(),
            'semester': self.semester.name,
        }


class Event:
    """Notification of a successful change in the record store."""

    def __init__(self, event_type: EventType, stream_id: str, event_data: Dict[str, Any]):
        self._id = str(uuid.uuid4())
        self._event_type = event_type
        self._stream_id = stream_id
        self._event_data = event_data
        self._timestamp = datetime.now(timezone.utc)

    @property
    def id(self) -> str:
        return self._id

    @property
    def event_type(self) -> EventType:
        return self._event_type

    @property
    def stream_id(self) -> str:
        return self._stream_id

    @property
    def event_data(self) -> Dict[str, Any]:
        return self._event_data.copy()

    @property
    def timestamp(self) -> datetime:
        return self._timestamp

    def __repr__(self) -> str:
        return f"Event(type={self._event_type.value}, stream={self._stream_id})"
