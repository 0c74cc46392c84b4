import pytest
from datetime import date

from unirecords.core.enums import StudentStatus, CourseType, Semester, GradeValue, Faculty, EventType
from unirecords.core.exceptions import (
    NotFoundError, InvalidStateError, FacultyMismatchError, CapacityExceededError,
    DuplicateRegistrationError, NotRegisteredError, TerminalStateError, ValidationError
)
from unirecords.services import RecordStore, EventLog


@pytest.fixture(name="store")
def store_fixture():
    """Create an empty record store for each test"""
    return RecordStore()


def make_student(store, faculty=Faculty.COMPUTER_SCIENCE, status=StudentStatus.ACTIVE, name="Ivan Petrenko"):
    return store.enroll_student(
        full_name=name,
        faculty=faculty,
        year=1,
        status=status,
        enrollment_date=date(2024, 9, 1),
        group_number="CS-101"
    )


def make_course(store, faculty=Faculty.COMPUTER_SCIENCE, semester=Semester.FIRST, max_students=50, name="Programming"):
    return store.add_course(
        name=name,
        course_type=CourseType.MANDATORY,
        credits=5,
        semester=semester,
        faculty=faculty,
        max_students=max_students
    )


# ============= CREATION TESTS =============

def test_enroll_student_assigns_increasing_ids(store):
    """Test student ids start at 1 and increase"""
    first = make_student(store)
    second = make_student(store, name="Maria Bondar")
    assert first.id == 1
    assert second.id == 2
    assert second.full_name == "Maria Bondar"
    assert second.faculty == Faculty.COMPUTER_SCIENCE


def test_enroll_student_in_terminal_status(store):
    """Test students may be enrolled directly into any status"""
    student = make_student(store, status=StudentStatus.GRADUATED)
    assert student.status == StudentStatus.GRADUATED


def test_enroll_student_accepts_enum_names(store):
    """Test enum fields may be given by member name"""
    student = make_student(store, faculty="LAW", status="academic_leave")
    assert student.faculty == Faculty.LAW
    assert student.status == StudentStatus.ACADEMIC_LEAVE


def test_enroll_student_invalid_faculty(store):
    """Test unknown enum names are rejected"""
    with pytest.raises(ValidationError):
        make_student(store, faculty="MEDICINE")
    assert store.list_students() == []


def test_student_and_course_ids_are_independent(store):
    """Test student and course counters do not share a sequence"""
    make_student(store)
    course = make_course(store)
    assert course.id == 1


# ============= REGISTRATION TESTS =============

def test_register_for_course(store):
    """Test a successful registration"""
    student = make_student(store)
    course = make_course(store)
    registration = store.register_for_course(student.id, course.id)
    assert registration.student_id == student.id
    assert registration.course_id == course.id
    assert store.is_registered(student.id, course.id)
    assert store.get_enrollment_count(course.id) == 1


def test_register_unknown_student(store):
    """Test registering a missing student"""
    course = make_course(store)
    with pytest.raises(NotFoundError, match="Student not found"):
        store.register_for_course(42, course.id)


def test_register_unknown_course(store):
    """Test registering for a missing course"""
    student = make_student(store)
    with pytest.raises(NotFoundError, match="Course not found"):
        store.register_for_course(student.id, 42)


def test_register_both_unknown_reports_student(store):
    """Test the student lookup is reported before the course lookup"""
    with pytest.raises(NotFoundError, match="Student not found"):
        store.register_for_course(1, 1)


def test_register_inactive_student(store):
    """Test students on academic leave cannot register"""
    student = make_student(store, status=StudentStatus.ACADEMIC_LEAVE)
    course = make_course(store)
    with pytest.raises(InvalidStateError):
        store.register_for_course(student.id, course.id)


def test_register_faculty_mismatch(store):
    """Test a law student cannot take an economics course"""
    student = make_student(store, faculty=Faculty.LAW)
    course = make_course(store, faculty=Faculty.ECONOMICS)
    with pytest.raises(FacultyMismatchError):
        store.register_for_course(student.id, course.id)
    assert store.course_registrations(course.id) == []


def test_register_capacity_exceeded(store):
    """Test a second student cannot take a course with one seat"""
    first = make_student(store)
    second = make_student(store, name="Maria Bondar")
    course = make_course(store, max_students=1)
    store.register_for_course(first.id, course.id)
    with pytest.raises(CapacityExceededError):
        store.register_for_course(second.id, course.id)
    assert store.get_enrollment_count(course.id) == 1


def test_register_duplicate(store):
    """Test the same student cannot register twice"""
    student = make_student(store)
    course = make_course(store)
    store.register_for_course(student.id, course.id)
    with pytest.raises(DuplicateRegistrationError):
        store.register_for_course(student.id, course.id)
    assert len(store.course_registrations(course.id)) == 1


def test_register_capacity_checked_before_duplicate(store):
    """Test a full course reports capacity even for an already registered student"""
    student = make_student(store)
    course = make_course(store, max_students=1)
    store.register_for_course(student.id, course.id)
    with pytest.raises(CapacityExceededError):
        store.register_for_course(student.id, course.id)


def test_register_status_checked_before_faculty(store):
    """Test an inactive student of another faculty reports the status first"""
    student = make_student(store, faculty=Faculty.LAW, status=StudentStatus.EXPELLED)
    course = make_course(store, faculty=Faculty.ECONOMICS)
    with pytest.raises(InvalidStateError):
        store.register_for_course(student.id, course.id)


def test_registrations_never_exceed_capacity(store):
    """Test capacity holds across many attempts"""
    course = make_course(store, max_students=3)
    students = [make_student(store, name=f"Student {i}") for i in range(6)]
    for student in students:
        try:
            store.register_for_course(student.id, course.id)
        except CapacityExceededError:
            pass
    registrations = store.course_registrations(course.id)
    assert len(registrations) == 3
    assert [r.student_id for r in registrations] == [s.id for s in students[:3]]


# ============= GRADING TESTS =============

def test_set_grade(store):
    """Test grading copies the course semester"""
    student = make_student(store)
    course = make_course(store, semester=Semester.SECOND)
    store.register_for_course(student.id, course.id)
    record = store.set_grade(student.id, course.id, GradeValue.GOOD)
    assert record.grade == GradeValue.GOOD
    assert record.semester == Semester.SECOND
    assert store.student_grades(student.id) == [record]


def test_set_grade_replaces_previous(store):
    """Test a second grade replaces the first and carries the later date"""
    student = make_student(store)
    course = make_course(store)
    store.register_for_course(student.id, course.id)
    first = store.set_grade(student.id, course.id, GradeValue.EXCELLENT)
    second = store.set_grade(student.id, course.id, GradeValue.EXCELLENT)
    grades = store.student_grades(student.id)
    assert len(grades) == 1
    assert grades[0] is second
    assert grades[0].date >= first.date


def test_set_grade_last_value_wins(store):
    """Test the last grade set for a pair is the one kept"""
    student = make_student(store)
    course = make_course(store)
    store.register_for_course(student.id, course.id)
    for grade in (GradeValue.UNSATISFACTORY, GradeValue.EXCELLENT, GradeValue.SATISFACTORY):
        store.set_grade(student.id, course.id, grade)
    grades = store.student_grades(student.id)
    assert [g.grade for g in grades] == [GradeValue.SATISFACTORY]


def test_set_grade_moves_record_to_end(store):
    """Test a replaced grade goes to the end of store order"""
    student = make_student(store)
    first_course = make_course(store, name="Programming")
    second_course = make_course(store, name="Databases")
    store.register_for_course(student.id, first_course.id)
    store.register_for_course(student.id, second_course.id)
    store.set_grade(student.id, first_course.id, GradeValue.GOOD)
    store.set_grade(student.id, second_course.id, GradeValue.GOOD)
    store.set_grade(student.id, first_course.id, GradeValue.EXCELLENT)
    assert [g.course_id for g in store.student_grades(student.id)] == [second_course.id, first_course.id]


def test_set_grade_not_registered(store):
    """Test grading requires a registration"""
    student = make_student(store)
    course = make_course(store)
    with pytest.raises(NotRegisteredError):
        store.set_grade(student.id, course.id, GradeValue.GOOD)
    assert store.student_grades(student.id) == []


def test_set_grade_unknown_ids(store):
    """Test grading missing records"""
    student = make_student(store)
    with pytest.raises(NotFoundError, match="Course not found"):
        store.set_grade(student.id, 7, GradeValue.GOOD)
    with pytest.raises(NotFoundError, match="Student not found"):
        store.set_grade(7, 7, GradeValue.GOOD)


def test_set_grade_for_inactive_student(store):
    """Test a registered student may be graded after leaving active status"""
    student = make_student(store)
    course = make_course(store)
    store.register_for_course(student.id, course.id)
    store.update_student_status(student.id, StudentStatus.GRADUATED)
    record = store.set_grade(student.id, course.id, GradeValue.GOOD)
    assert record.grade == GradeValue.GOOD


def test_set_grade_accepts_numeric_value(store):
    """Test grades may be given by their numeric value"""
    student = make_student(store)
    course = make_course(store)
    store.register_for_course(student.id, course.id)
    assert store.set_grade(student.id, course.id, 4).grade == GradeValue.GOOD


# ============= STATUS TESTS =============

def test_update_student_status(store):
    """Test non-terminal statuses change freely"""
    student = make_student(store)
    store.update_student_status(student.id, StudentStatus.ACADEMIC_LEAVE)
    assert store.get_student(student.id).status == StudentStatus.ACADEMIC_LEAVE
    store.update_student_status(student.id, StudentStatus.ACTIVE)
    assert store.get_student(student.id).status == StudentStatus.ACTIVE


def test_graduated_is_terminal(store):
    """Test a graduated student cannot become active again"""
    student = make_student(store)
    store.update_student_status(student.id, StudentStatus.GRADUATED)
    with pytest.raises(TerminalStateError):
        store.update_student_status(student.id, StudentStatus.ACTIVE)
    store.update_student_status(student.id, StudentStatus.GRADUATED)
    assert store.get_student(student.id).status == StudentStatus.GRADUATED


@pytest.mark.parametrize("target", [StudentStatus.ACTIVE, StudentStatus.ACADEMIC_LEAVE, StudentStatus.GRADUATED])
def test_expelled_is_terminal(store, target):
    """Test an expelled student cannot move to any other status"""
    student = make_student(store, status=StudentStatus.EXPELLED)
    with pytest.raises(TerminalStateError):
        store.update_student_status(student.id, target)
    assert store.get_student(student.id).status == StudentStatus.EXPELLED


def test_update_status_unknown_student(store):
    with pytest.raises(NotFoundError):
        store.update_student_status(3, StudentStatus.ACTIVE)


# ============= QUERY TESTS =============

def test_students_by_faculty(store):
    """Test faculty filtering keeps store order"""
    first = make_student(store, name="A")
    make_student(store, faculty=Faculty.LAW, name="B")
    third = make_student(store, name="C")
    assert store.students_by_faculty(Faculty.COMPUTER_SCIENCE) == [first, third]
    assert store.students_by_faculty(Faculty.ENGINEERING) == []


def test_available_courses(store):
    """Test filtering courses by faculty and semester"""
    first = make_course(store, semester=Semester.FIRST)
    make_course(store, semester=Semester.SECOND)
    make_course(store, faculty=Faculty.LAW, semester=Semester.FIRST)
    assert store.available_courses(Faculty.COMPUTER_SCIENCE, Semester.FIRST) == [first]


def test_accessors_return_copies(store):
    """Test mutating returned lists does not touch the store"""
    make_student(store)
    students = store.students_by_faculty(Faculty.COMPUTER_SCIENCE)
    students.clear()
    assert len(store.students_by_faculty(Faculty.COMPUTER_SCIENCE)) == 1
    assert len(store.list_students()) == 1


def test_average_grade(store):
    """Test the mean of grades 5, 4 and 3 is 4"""
    student = make_student(store)
    for grade, name in ((GradeValue.EXCELLENT, "A"), (GradeValue.GOOD, "B"), (GradeValue.SATISFACTORY, "C")):
        course = make_course(store, name=name)
        store.register_for_course(student.id, course.id)
        store.set_grade(student.id, course.id, grade)
    assert store.average_grade(student.id) == 4
    assert store.has_grades(student.id)


def test_average_grade_without_grades(store):
    """Test a student without grades averages 0"""
    student = make_student(store)
    assert store.average_grade(student.id) == 0
    assert not store.has_grades(student.id)
    assert store.average_grade(99) == 0


def test_excellent_students(store):
    """Test only students with all-top grades are excellent"""
    excellent = make_student(store, name="Excellent")
    mixed = make_student(store, name="Mixed")
    make_student(store, name="Ungraded")
    first = make_course(store, name="A")
    second = make_course(store, name="B")
    for student in (excellent, mixed):
        store.register_for_course(student.id, first.id)
        store.register_for_course(student.id, second.id)
    store.set_grade(excellent.id, first.id, GradeValue.EXCELLENT)
    store.set_grade(excellent.id, second.id, GradeValue.EXCELLENT)
    store.set_grade(mixed.id, first.id, GradeValue.EXCELLENT)
    store.set_grade(mixed.id, second.id, GradeValue.GOOD)
    assert store.excellent_students(Faculty.COMPUTER_SCIENCE) == [excellent]
    assert store.excellent_students(Faculty.LAW) == []


def test_excellent_after_regrade(store):
    """Test a replaced grade no longer counts"""
    student = make_student(store)
    course = make_course(store)
    store.register_for_course(student.id, course.id)
    store.set_grade(student.id, course.id, GradeValue.GOOD)
    assert store.excellent_students(Faculty.COMPUTER_SCIENCE) == []
    store.set_grade(student.id, course.id, GradeValue.EXCELLENT)
    assert store.excellent_students(Faculty.COMPUTER_SCIENCE) == [student]


def test_get_statistics(store):
    student = make_student(store)
    course = make_course(store)
    store.register_for_course(student.id, course.id)
    store.set_grade(student.id, course.id, GradeValue.GOOD)
    stats = store.get_statistics()
    assert stats['students'] == 1
    assert stats['courses'] == 1
    assert stats['registrations'] == 1
    assert stats['grade_records'] == 1


# ============= EVENT TESTS =============

def test_events_published_on_success_only(store):
    """Test events follow successful mutations and nothing else"""
    log = EventLog()
    store.add_event_handler(log)
    student = make_student(store)
    course = make_course(store, faculty=Faculty.LAW)
    with pytest.raises(FacultyMismatchError):
        store.register_for_course(student.id, course.id)
    assert [e.event_type for e in log.events()] == [EventType.STUDENT_ENROLLED, EventType.COURSE_ADDED]


def test_status_reassert_publishes_nothing(store):
    log = EventLog(event_types=[EventType.STATUS_CHANGE])
    store.add_event_handler(log)
    student = make_student(store)
    store.update_student_status(student.id, StudentStatus.GRADUATED)
    store.update_student_status(student.id, StudentStatus.GRADUATED)
    events = log.events()
    assert len(events) == 1
    assert events[0].event_data['status'] == "GRADUATED"


def test_failing_handler_does_not_break_store(store):
    """Test a raising handler is logged and ignored"""
    class BrokenHandler(EventLog):
        def handle_event(self, event):
            raise RuntimeError("boom")

    store.add_event_handler(BrokenHandler())
    student = make_student(store)
    assert store.get_student(student.id) is student
