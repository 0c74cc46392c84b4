"""
UniRecords: academic records core for a small university.

Keeps students, courses, registrations and grades consistent under the
university's business rules (faculty matching, course capacity, student
status lifecycle and grade-registration linkage).
"""

__version__ = "1.0.0"
__author__ = "UniRecords Development Team"
__description__ = "Academic records store with relational-integrity enforcement"
