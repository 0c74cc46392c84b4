"""
Main entry point for the records platform.
"""

import logging
from datetime import date
from typing import Optional

from .config import load_config, configure_logging
from .core.enums import StudentStatus, CourseType, Semester, GradeValue, Faculty
from .core.exceptions import RecordsException
from .services import RecordStore, EventLog
from .api.rest_api import RecordsRestAPI

logger = logging.getLogger(__name__)


class RecordsPlatform:
    """Wires the record store, its event log and the REST API together."""

    def __init__(self, config: Optional[dict] = None):
        self._config = config or {}
        self._store = RecordStore()
        self._event_log = EventLog()
        self._store.add_event_handler(self._event_log)
        self._rest_api = RecordsRestAPI(
            self._store,
            self._event_log,
            title=self._config.get('title', "University Records API")
        )
        logger.info("Records platform initialized")

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def app(self):
        return self._rest_api.app

    def start_rest_server(self, host: str = "0.0.0.0", port: int = 8000):
        """Serve the REST API until interrupted."""
        import uvicorn

        logger.info("Starting REST server on %s:%s", host, port)
        uvicorn.run(
            self._rest_api.app,
            host=host,
            port=port,
            log_level=self._config.get('log_level', 'INFO').lower()
        )

    def run_demo(self):
        """Run a demonstration of the record store."""
        store = self._store

        programming = store.add_course(
            name="Programming Fundamentals",
            course_type=CourseType.MANDATORY,
            credits=5,
            semester=Semester.FIRST,
            faculty=Faculty.COMPUTER_SCIENCE,
            max_students=50
        )
        store.add_course(
            name="Calculus",
            course_type=CourseType.MANDATORY,
            credits=5,
            semester=Semester.FIRST,
            faculty=Faculty.ENGINEERING,
            max_students=40
        )

        student = store.enroll_student(
            full_name="Vladyslav Spyrydonov",
            faculty=Faculty.COMPUTER_SCIENCE,
            year=1,
            status=StudentStatus.ACTIVE,
            enrollment_date=date.today(),
            group_number="CS-101"
        )

        store.register_for_course(student.id, programming.id)
        store.set_grade(student.id, programming.id, GradeValue.EXCELLENT)

        print(f"Grades of {student.full_name}:")
        for record in store.student_grades(student.id):
            print(f"  {record.to_dict()}")

        print(f"Average grade of {student.full_name}: {store.average_grade(student.id)}")

        print("Excellent students of the Computer Science faculty:")
        for excellent in store.excellent_students(Faculty.COMPUTER_SCIENCE):
            print(f"  {excellent.full_name}")

        print(f"\nStatistics: {store.get_statistics()}")
        print(f"Events: {self._event_log.get_statistics()}")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="University records platform")
    parser.add_argument("--host", type=str, help="REST server host")
    parser.add_argument("--port", type=int, help="REST server port")
    parser.add_argument("--log-level", type=str, help="Logging level")
    parser.add_argument("--demo", action="store_true", help="Run demo mode")
    parser.add_argument("--config", type=str, help="Configuration file path")

    args = parser.parse_args()

    try:
        config = load_config(args.config, {
            'host': args.host,
            'port': args.port,
            'log_level': args.log_level,
        })
    except RecordsException as e:
        parser.error(e.message)

    configure_logging(config)
    platform = RecordsPlatform(config)

    if args.demo:
        platform.run_demo()
    else:
        try:
            platform.start_rest_server(config['host'], config['port'])
        except KeyboardInterrupt:
            logger.info("Shutting down...")


if __name__ == "__main__":
    main()
