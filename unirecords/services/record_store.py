"""
Record store and rule engine for students, courses, registrations and grades.
"""

import logging
import threading
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..core.entities import Student, Course, Registration, GradeRecord, Event
from ..core.enums import (
    StudentStatus, CourseType, Semester, GradeValue, Faculty, EventType, coerce_enum
)
from ..core.exceptions import (
    NotFoundError, InvalidStateError, FacultyMismatchError, CapacityExceededError,
    DuplicateRegistrationError, NotRegisteredError, TerminalStateError, RecordsException
)
from ..core.interfaces import EventHandler

logger = logging.getLogger(__name__)

PairKey = Tuple[int, int]


class RecordStore:
    """In-memory academic records with relational-integrity enforcement.

    Every mutating operation runs all of its checks before its single state
    change, so a rejected call leaves the store untouched. Accessors return
    new lists; the internal collections never leave the store.
    """

    def __init__(self):
        self._students: Dict[int, Student] = {}
        self._courses: Dict[int, Course] = {}
        self._registrations: Dict[PairKey, Registration] = {}
        self._course_enrollment: Dict[int, int] = {}  # course_id -> registration count
        self._grades: Dict[PairKey, GradeRecord] = {}
        self._next_student_id = 1
        self._next_course_id = 1
        self._event_handlers: List[EventHandler] = []
        self._lock = threading.RLock()

    def add_event_handler(self, handler: EventHandler) -> None:
        """Add an event handler."""
        with self._lock:
            self._event_handlers.append(handler)

    # Creation

    def enroll_student(self, full_name: str, faculty: Faculty, year: int,
                       status: StudentStatus, enrollment_date: date,
                       group_number: str) -> Student:
        """Enroll a new student and assign the next student ID."""
        faculty = coerce_enum(Faculty, faculty)
        status = coerce_enum(StudentStatus, status)
        with self._lock:
            student = Student(
                entity_id=self._next_student_id,
                full_name=full_name,
                faculty=faculty,
                year=year,
                status=status,
                enrollment_date=enrollment_date,
                group_number=group_number
            )
            self._next_student_id += 1
            self._students[student.id] = student
            logger.debug("Enrolled student %s (%s)", student.id, full_name)
            self._publish_event(EventType.STUDENT_ENROLLED, f"student_{student.id}", {
                'student_id': student.id,
                'faculty': faculty.name,
                'status': status.name,
            })
            return student

    def add_course(self, name: str, course_type: CourseType, credits: int,
                   semester: Semester, faculty: Faculty, max_students: int) -> Course:
        """Add a new course and assign the next course ID."""
        course_type = coerce_enum(CourseType, course_type)
        semester = coerce_enum(Semester, semester)
        faculty = coerce_enum(Faculty, faculty)
        with self._lock:
            course = Course(
                entity_id=self._next_course_id,
                name=name,
                course_type=course_type,
                credits=credits,
                semester=semester,
                faculty=faculty,
                max_students=max_students
            )
            self._next_course_id += 1
            self._courses[course.id] = course
            self._course_enrollment[course.id] = 0
            logger.debug("Added course %s (%s)", course.id, name)
            self._publish_event(EventType.COURSE_ADDED, f"course_{course.id}", {
                'course_id': course.id,
                'faculty': faculty.name,
                'semester': semester.name,
            })
            return course

    # Mutations guarded by business rules

    def register_for_course(self, student_id: int, course_id: int) -> Registration:
        """Register a student for a course.

        Checks run in a fixed order so that a call violating several rules
        always reports the same one: student exists, course exists, student
        is active, faculties match, course has room, pair not yet registered.
        """
        with self._lock:
            student = self._find_student(student_id)
            course = self._find_course(course_id)

            if not student.is_active:
                self._reject(InvalidStateError(
                    "Student is not active",
                    details={'student_id': student_id, 'status': student.status.name}
                ))

            if student.faculty != course.faculty:
                self._reject(FacultyMismatchError(
                    "Student and course faculties do not match",
                    details={'student_id': student_id, 'course_id': course_id,
                             'student_faculty': student.faculty.name,
                             'course_faculty': course.faculty.name}
                ))

            enrolled = self._course_enrollment[course_id]
            if enrolled >= course.max_students:
                self._reject(CapacityExceededError(
                    "Course has reached maximum number of students",
                    details={'course_id': course_id, 'max_students': course.max_students}
                ))

            key = (student_id, course_id)
            if key in self._registrations:
                self._reject(DuplicateRegistrationError(
                    "Student is already registered for this course",
                    details={'student_id': student_id, 'course_id': course_id}
                ))

            registration = Registration(student_id=student_id, course_id=course_id)
            self._registrations[key] = registration
            self._course_enrollment[course_id] = enrolled + 1
            logger.debug("Registered student %s for course %s (%d/%d)",
                         student_id, course_id, enrolled + 1, course.max_students)
            self._publish_event(EventType.REGISTRATION, f"course_{course_id}", {
                'student_id': student_id,
                'course_id': course_id,
                'enrolled_count': enrolled + 1,
            })
            return registration

    def set_grade(self, student_id: int, course_id: int, grade: GradeValue) -> GradeRecord:
        """Assign a grade, replacing any earlier grade for the same registration.

        The student does not need to be active; only the registration matters.
        The record takes the course's semester and the current time.
        """
        grade = coerce_enum(GradeValue, grade)
        with self._lock:
            self._find_student(student_id)
            course = self._find_course(course_id)

            key = (student_id, course_id)
            if key not in self._registrations:
                self._reject(NotRegisteredError(
                    "Student is not registered for the course",
                    details={'student_id': student_id, 'course_id': course_id}
                ))

            record = GradeRecord(
                student_id=student_id,
                course_id=course_id,
                grade=grade,
                date=datetime.now(timezone.utc),
                semester=course.semester
            )
            # pop first so the new record moves to the end of store order
            previous = self._grades.pop(key, None)
            self._grades[key] = record
            logger.debug("Set grade %s for student %s in course %s%s",
                         grade.name, student_id, course_id,
                         f" (was {previous.grade.name})" if previous else "")
            self._publish_event(EventType.GRADING, f"student_{student_id}", {
                'student_id': student_id,
                'course_id': course_id,
                'grade': grade.value,
                'replaced': previous is not None,
            })
            return record

    def update_student_status(self, student_id: int, new_status: StudentStatus) -> Student:
        """Change a student's status; graduated and expelled students stay put."""
        new_status = coerce_enum(StudentStatus, new_status)
        with self._lock:
            student = self._find_student(student_id)
            previous = student.status
            try:
                student.change_status(new_status)
            except TerminalStateError as e:
                self._reject(e)
            if previous != new_status:
                logger.debug("Student %s status %s -> %s", student_id, previous.name, new_status.name)
                self._publish_event(EventType.STATUS_CHANGE, f"student_{student_id}", {
                    'student_id': student_id,
                    'previous_status': previous.name,
                    'status': new_status.name,
                })
            return student

    # Queries

    def get_student(self, student_id: int) -> Student:
        """Get a student by ID."""
        with self._lock:
            return self._find_student(student_id)

    def get_course(self, course_id: int) -> Course:
        """Get a course by ID."""
        with self._lock:
            return self._find_course(course_id)

    def list_students(self) -> List[Student]:
        with self._lock:
            return list(self._students.values())

    def list_courses(self) -> List[Course]:
        with self._lock:
            return list(self._courses.values())

    def students_by_faculty(self, faculty: Faculty) -> List[Student]:
        """Get students belonging to a faculty, in store order."""
        faculty = coerce_enum(Faculty, faculty)
        with self._lock:
            return [s for s in self._students.values() if s.faculty == faculty]

    def student_grades(self, student_id: int) -> List[GradeRecord]:
        """Get the current grade records of a student, in store order."""
        with self._lock:
            return [g for g in self._grades.values() if g.student_id == student_id]

    def available_courses(self, faculty: Faculty, semester: Semester) -> List[Course]:
        """Get courses offered by a faculty in a semester."""
        faculty = coerce_enum(Faculty, faculty)
        semester = coerce_enum(Semester, semester)
        with self._lock:
            return [c for c in self._courses.values()
                    if c.faculty == faculty and c.semester == semester]

    def average_grade(self, student_id: int) -> float:
        """Mean of a student's grade values, 0.0 when the student has no grades.

        No grade value is 0, but use has_grades() to tell the empty case apart.
        """
        grades = self.student_grades(student_id)
        if not grades:
            return 0.0
        return sum(g.grade.value for g in grades) / len(grades)

    def has_grades(self, student_id: int) -> bool:
        with self._lock:
            return any(g.student_id == student_id for g in self._grades.values())

    def excellent_students(self, faculty: Faculty) -> List[Student]:
        """Get faculty students whose every grade is the top grade.

        Students without any grade are not excellent.
        """
        top = GradeValue.max_value()
        with self._lock:
            result = []
            for student in self.students_by_faculty(faculty):
                grades = self.student_grades(student.id)
                if grades and all(g.grade == top for g in grades):
                    result.append(student)
            return result

    def is_registered(self, student_id: int, course_id: int) -> bool:
        with self._lock:
            return (student_id, course_id) in self._registrations

    def course_registrations(self, course_id: int) -> List[Registration]:
        """Get registrations for a course, in store order."""
        with self._lock:
            return [r for r in self._registrations.values() if r.course_id == course_id]

    def student_registrations(self, student_id: int) -> List[Registration]:
        """Get registrations of a student, in store order."""
        with self._lock:
            return [r for r in self._registrations.values() if r.student_id == student_id]

    def get_enrollment_count(self, course_id: int) -> int:
        """Get number of students registered for a course."""
        with self._lock:
            return self._course_enrollment.get(course_id, 0)

    def get_statistics(self) -> Dict[str, Any]:
        """Get record store statistics."""
        with self._lock:
            return {
                'students': len(self._students),
                'courses': len(self._courses),
                'registrations': len(self._registrations),
                'grade_records': len(self._grades),
                'event_handlers': len(self._event_handlers)
            }

    # Internals

    def _find_student(self, student_id: int) -> Student:
        student = self._students.get(student_id)
        if student is None:
            self._reject(NotFoundError("Student not found", details={'student_id': student_id}))
        return student

    def _find_course(self, course_id: int) -> Course:
        course = self._courses.get(course_id)
        if course is None:
            self._reject(NotFoundError("Course not found", details={'course_id': course_id}))
        return course

    def _reject(self, error: RecordsException) -> None:
        """Log a rule violation and raise it."""
        logger.info("Rejected: %s %s", error.message, error.details)
        raise error

    def _publish_event(self, event_type: EventType, stream_id: str,
                       event_data: Dict[str, Any]) -> Optional[Event]:
        """Publish an event to all handlers."""
        if not self._event_handlers:
            return None

        event = Event(event_type=event_type, stream_id=stream_id, event_data=event_data)
        for handler in self._event_handlers:
            if handler.can_handle(event_type.value):
                try:
                    handler.handle_event(event)
                except Exception:
                    logger.error("Error in event handler %s", handler.__class__.__name__, exc_info=True)
        return event
