#!/usr/bin/env python3
"""
Demo scenario for the records platform: walks through every business rule.
"""

import sys
import os
from datetime import date

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from unirecords.main import RecordsPlatform
from unirecords.core.enums import StudentStatus, CourseType, Semester, GradeValue, Faculty
from unirecords.core.exceptions import RecordsException


def attempt(description, operation, *args):
    """Run an operation and report the rule it trips, if any."""
    try:
        operation(*args)
        print(f"  {description}: ok")
    except RecordsException as e:
        print(f"  {description}: {e.error_code} - {e.message}")


def run_demo():
    """Run a demo of the registration, grading and status rules."""
    print("=" * 60)
    print("UNIVERSITY RECORDS - DEMO")
    print("=" * 60)

    platform = RecordsPlatform()
    store = platform.store

    print("\n1. Creating courses and students...")
    seminar = store.add_course("Algorithms Seminar", CourseType.SPECIAL, 3,
                               Semester.SECOND, Faculty.COMPUTER_SCIENCE, 1)
    economics = store.add_course("Microeconomics", CourseType.OPTIONAL, 4,
                                 Semester.FIRST, Faculty.ECONOMICS, 30)
    alice = store.enroll_student("Alice Kovalenko", Faculty.COMPUTER_SCIENCE, 2,
                                 StudentStatus.ACTIVE, date(2023, 9, 1), "CS-201")
    bohdan = store.enroll_student("Bohdan Melnyk", Faculty.COMPUTER_SCIENCE, 2,
                                  StudentStatus.ACTIVE, date(2023, 9, 1), "CS-201")
    olena = store.enroll_student("Olena Shevchenko", Faculty.LAW, 3,
                                 StudentStatus.ACADEMIC_LEAVE, date(2022, 9, 1), "LAW-301")

    print("\n2. Registration rules...")
    attempt("Alice -> seminar", store.register_for_course, alice.id, seminar.id)
    attempt("Alice -> seminar again", store.register_for_course, alice.id, seminar.id)
    attempt("Bohdan -> full seminar", store.register_for_course, bohdan.id, seminar.id)
    attempt("Bohdan -> economics", store.register_for_course, bohdan.id, economics.id)
    attempt("Olena on leave -> economics", store.register_for_course, olena.id, economics.id)
    attempt("Unknown student", store.register_for_course, 99, seminar.id)

    print("\n3. Grading rules...")
    attempt("Grade Alice GOOD", store.set_grade, alice.id, seminar.id, GradeValue.GOOD)
    attempt("Regrade Alice EXCELLENT", store.set_grade, alice.id, seminar.id, GradeValue.EXCELLENT)
    attempt("Grade unregistered Bohdan", store.set_grade, bohdan.id, seminar.id, GradeValue.GOOD)
    print(f"  Alice's grades: {[g.to_dict() for g in store.student_grades(alice.id)]}")
    print(f"  Alice's average: {store.average_grade(alice.id)}")
    print(f"  Excellent CS students: {[s.full_name for s in store.excellent_students(Faculty.COMPUTER_SCIENCE)]}")

    print("\n4. Status lifecycle...")
    attempt("Alice graduates", store.update_student_status, alice.id, StudentStatus.GRADUATED)
    attempt("Alice back to active", store.update_student_status, alice.id, StudentStatus.ACTIVE)
    attempt("Alice graduates again", store.update_student_status, alice.id, StudentStatus.GRADUATED)

    print("\n5. Statistics...")
    print(f"  Records: {store.get_statistics()}")
    print(f"  Events: {platform.event_log.get_statistics()}")

    print("\n" + "=" * 60)
    print("DEMO COMPLETED SUCCESSFULLY!")
    print("=" * 60)


if __name__ == "__main__":
    run_demo()
