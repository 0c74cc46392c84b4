"""
REST API for the records platform using FastAPI.
"""

import logging
import threading
from datetime import date, datetime, timezone
from typing import Optional, Dict, Any, List, Union

from pydantic import BaseModel, Field

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.entities import Student, Course, Registration, GradeRecord
from ..core.enums import Faculty, Semester, coerce_enum
from ..core.exceptions import (
    RecordsException, NotFoundError, InvalidStateError, FacultyMismatchError,
    CapacityExceededError, DuplicateRegistrationError, NotRegisteredError,
    TerminalStateError, ValidationError
)
from ..services import RecordStore, EventLog

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateRegistrationError: status.HTTP_409_CONFLICT,
    CapacityExceededError: status.HTTP_409_CONFLICT,
    TerminalStateError: status.HTTP_409_CONFLICT,
    InvalidStateError: 422,
    FacultyMismatchError: 422,
    NotRegisteredError: 422,
    ValidationError: status.HTTP_400_BAD_REQUEST,
}


# Pydantic models for API; enum fields travel by member name
class StudentCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    faculty: str = Field(..., min_length=1)
    year: int = Field(..., ge=1, le=10)
    status: str = Field("ACTIVE", min_length=1)
    enrollment_date: date = Field(default_factory=date.today)
    group_number: str = Field(..., min_length=1, max_length=20)


class StudentResponse(BaseModel):
    id: int
    full_name: str
    faculty: str
    year: int
    status: str
    enrollment_date: date
    group_number: str
    created_at: datetime
    updated_at: datetime
    version: int


class StatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    course_type: str = Field(..., min_length=1)
    credits: int = Field(..., ge=1, le=30)
    semester: str = Field(..., min_length=1)
    faculty: str = Field(..., min_length=1)
    max_students: int = Field(..., ge=1)


class CourseResponse(BaseModel):
    id: int
    name: str
    course_type: str
    credits: int
    semester: str
    faculty: str
    max_students: int
    enrolled_count: int
    created_at: datetime


class RegistrationRequest(BaseModel):
    student_id: int = Field(..., ge=1)
    course_id: int = Field(..., ge=1)


class RegistrationResponse(BaseModel):
    student_id: int
    course_id: int


class GradeRequest(BaseModel):
    student_id: int = Field(..., ge=1)
    course_id: int = Field(..., ge=1)
    grade: Union[int, str]


class GradeResponse(BaseModel):
    student_id: int
    course_id: int
    grade: str
    value: int
    date: datetime
    semester: str


class AverageResponse(BaseModel):
    student_id: int
    average: float
    grade_count: int


class StatisticsResponse(BaseModel):
    success: bool
    message: str
    statistics: Dict[str, Any]


class RecordsRestAPI:
    """REST API wrapping a single record store."""

    def __init__(self, store: RecordStore, event_log: Optional[EventLog] = None,
                 title: str = "University Records API"):
        self._store = store
        self._event_log = event_log
        self._lock = threading.RLock()

        self.app = FastAPI(
            title=title,
            description="Students, courses, registrations and grades with integrity rules",
            version="1.0.0",
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_exception_handlers()
        self._setup_routes()

    def _setup_exception_handlers(self):
        """Map record errors to HTTP responses."""

        @self.app.exception_handler(RecordsException)
        async def records_exception_handler(request: Request, exc: RecordsException):
            status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
            logger.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc.error_code)
            return JSONResponse(
                status_code=status_code,
                content={"detail": exc.message, "error_code": exc.error_code}
            )

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            """Root endpoint."""
            return {
                "message": self.app.title,
                "version": "1.0.0",
                "docs": "/docs"
            }

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        # Student endpoints
        @self.app.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
        async def enroll_student(student_data: StudentCreate):
            """Enroll a new student."""
            with self._lock:
                student = self._store.enroll_student(
                    full_name=student_data.full_name,
                    faculty=student_data.faculty,
                    year=student_data.year,
                    status=student_data.status,
                    enrollment_date=student_data.enrollment_date,
                    group_number=student_data.group_number
                )
                logger.info("Enrolled student %s", student.id)
                return self._student_to_response(student)

        @self.app.get("/students", response_model=List[StudentResponse])
        async def list_students(faculty: Optional[str] = None):
            """List students, optionally of one faculty."""
            with self._lock:
                if faculty:
                    students = self._store.students_by_faculty(faculty)
                else:
                    students = self._store.list_students()
                return [self._student_to_response(s) for s in students]

        @self.app.get("/students/{student_id}", response_model=StudentResponse)
        async def get_student(student_id: int):
            """Get a student by ID."""
            with self._lock:
                return self._student_to_response(self._store.get_student(student_id))

        @self.app.put("/students/{student_id}/status", response_model=StudentResponse)
        async def update_student_status(student_id: int, status_data: StatusUpdate):
            """Change a student's status."""
            with self._lock:
                student = self._store.update_student_status(student_id, status_data.status)
                return self._student_to_response(student)

        @self.app.get("/students/{student_id}/grades", response_model=List[GradeResponse])
        async def get_student_grades(student_id: int):
            """Get current grades of a student."""
            with self._lock:
                self._store.get_student(student_id)
                return [self._grade_to_response(g) for g in self._store.student_grades(student_id)]

        @self.app.get("/students/{student_id}/average", response_model=AverageResponse)
        async def get_average_grade(student_id: int):
            """Get a student's average grade; grade_count is 0 when there are no grades."""
            with self._lock:
                self._store.get_student(student_id)
                return AverageResponse(
                    student_id=student_id,
                    average=self._store.average_grade(student_id),
                    grade_count=len(self._store.student_grades(student_id))
                )

        @self.app.get("/students/{student_id}/registrations", response_model=List[RegistrationResponse])
        async def get_student_registrations(student_id: int):
            """Get courses a student is registered for."""
            with self._lock:
                self._store.get_student(student_id)
                return [self._registration_to_response(r)
                        for r in self._store.student_registrations(student_id)]

        # Course endpoints
        @self.app.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
        async def add_course(course_data: CourseCreate):
            """Add a new course."""
            with self._lock:
                course = self._store.add_course(
                    name=course_data.name,
                    course_type=course_data.course_type,
                    credits=course_data.credits,
                    semester=course_data.semester,
                    faculty=course_data.faculty,
                    max_students=course_data.max_students
                )
                logger.info("Added course %s", course.id)
                return self._course_to_response(course)

        @self.app.get("/courses", response_model=List[CourseResponse])
        async def list_courses(faculty: Optional[str] = None, semester: Optional[str] = None):
            """List courses, optionally filtered by faculty and semester."""
            with self._lock:
                if faculty and semester:
                    courses = self._store.available_courses(faculty, semester)
                else:
                    courses = self._store.list_courses()
                    if faculty:
                        wanted_faculty = coerce_enum(Faculty, faculty)
                        courses = [c for c in courses if c.faculty == wanted_faculty]
                    if semester:
                        wanted_semester = coerce_enum(Semester, semester)
                        courses = [c for c in courses if c.semester == wanted_semester]
                return [self._course_to_response(c) for c in courses]

        @self.app.get("/courses/{course_id}", response_model=CourseResponse)
        async def get_course(course_id: int):
            """Get a course by ID."""
            with self._lock:
                return self._course_to_response(self._store.get_course(course_id))

        # Registration and grading endpoints
        @self.app.post("/registrations", response_model=RegistrationResponse,
                       status_code=status.HTTP_201_CREATED)
        async def register_for_course(registration_data: RegistrationRequest):
            """Register a student for a course."""
            with self._lock:
                registration = self._store.register_for_course(
                    registration_data.student_id, registration_data.course_id
                )
                return self._registration_to_response(registration)

        @self.app.put("/grades", response_model=GradeResponse)
        async def set_grade(grade_data: GradeRequest):
            """Set the grade of a registered student, replacing any earlier one."""
            with self._lock:
                record = self._store.set_grade(grade_data.student_id, grade_data.course_id, grade_data.grade)
                return self._grade_to_response(record)

        @self.app.get("/faculties/{faculty}/excellent-students", response_model=List[StudentResponse])
        async def get_excellent_students(faculty: str):
            """Get students of a faculty with only top grades."""
            with self._lock:
                return [self._student_to_response(s) for s in self._store.excellent_students(faculty)]

        # Statistics endpoints
        @self.app.get("/statistics", response_model=StatisticsResponse)
        async def get_statistics():
            """Get system statistics."""
            with self._lock:
                statistics = {"records": self._store.get_statistics()}
                if self._event_log is not None:
                    statistics["events"] = self._event_log.get_statistics()

                return StatisticsResponse(
                    success=True,
                    message="Statistics retrieved successfully",
                    statistics=statistics
                )

    def _student_to_response(self, student: Student) -> StudentResponse:
        """Convert Student entity to response model."""
        return StudentResponse(
            id=student.id,
            full_name=student.full_name,
            faculty=student.faculty.name,
            year=student.year,
            status=student.status.name,
            enrollment_date=student.enrollment_date,
            group_number=student.group_number,
            created_at=student.created_at,
            updated_at=student.updated_at,
            version=student.version
        )

    def _course_to_response(self, course: Course) -> CourseResponse:
        """Convert Course entity to response model."""
        return CourseResponse(
            id=course.id,
            name=course.name,
            course_type=course.course_type.name,
            credits=course.credits,
            semester=course.semester.name,
            faculty=course.faculty.name,
            max_students=course.max_students,
            enrolled_count=self._store.get_enrollment_count(course.id),
            created_at=course.created_at
        )

    def _registration_to_response(self, registration: Registration) -> RegistrationResponse:
        return RegistrationResponse(student_id=registration.student_id, course_id=registration.course_id)

    def _grade_to_response(self, record: GradeRecord) -> GradeResponse:
        return GradeResponse(
            student_id=record.student_id,
            course_id=record.course_id,
            grade=record.grade.name,
            value=record.grade.value,
            date=record.date,
            semester=record.semester.name
        )
