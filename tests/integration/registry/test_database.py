"""Integration tests for the registry database."""

import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from coursesapi.registry.database import Database
from coursesapi.registry.models import (
    Course,
    CourseTemplate,
    Enrollment,
    EnrollmentStatus,
    Student,
)


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        return f.name


@pytest.fixture
def database(temp_db_path: str) -> Database:
    """Create a database instance with tables."""
    db = Database(temp_db_path)
    db.create_tables()
    yield db
    db.close()
    Path(temp_db_path).unlink(missing_ok=True)
    Path(f"{temp_db_path}-wal").unlink(missing_ok=True)
    Path(f"{temp_db_path}-shm").unlink(missing_ok=True)


@pytest.fixture
def course_id(database: Database) -> int:
    """Seed one template, one course and one student."""
    with database.transaction() as session:
        session.add(CourseTemplate(template_id="T-514-VEFT", name="Web Services"))
        session.add(Student(ssn="1234567890", name="Herp McDerpsson"))
        course = Course(
            template_id="T-514-VEFT",
            semester="20173",
            start_date=date(2017, 8, 17),
            end_date=date(2017, 11, 10),
            max_students=10,
        )
        session.add(course)
        session.flush()
        return course.id


@pytest.mark.integration
class TestDatabaseSetup:
    """Tests for database setup."""

    def test_database_creates_tables(self, database: Database) -> None:
        tables = inspect(database.engine).get_table_names()

        assert {"course_templates", "courses", "students", "enrollments"} <= set(tables)

    def test_database_wal_mode(self, database: Database) -> None:
        assert database.is_wal_mode()

    def test_data_survives_reopen(self, temp_db_path: str, course_id: int) -> None:
        reopened = Database(temp_db_path)
        try:
            with reopened.transaction() as session:
                assert session.get(Course, course_id) is not None
        finally:
            reopened.close()


@pytest.mark.integration
class TestConstraints:
    """Tests for schema constraints."""

    def test_one_row_per_pair(self, database: Database, course_id: int) -> None:
        with database.transaction() as session:
            session.add(Enrollment(course_id=course_id, student_ssn="1234567890"))

        with pytest.raises(IntegrityError), database.transaction() as session:
            session.add(
                Enrollment(
                    course_id=course_id,
                    student_ssn="1234567890",
                    status=EnrollmentStatus.WAITLISTED.value,
                )
            )

    def test_enrollment_requires_existing_student(
        self, database: Database, course_id: int
    ) -> None:
        with pytest.raises(IntegrityError), database.transaction() as session:
            session.add(Enrollment(course_id=course_id, student_ssn="0000000000"))

    def test_course_delete_cascades(self, database: Database, course_id: int) -> None:
        with database.transaction() as session:
            session.add(Enrollment(course_id=course_id, student_ssn="1234567890"))

        with database.transaction() as session:
            session.delete(session.get(Course, course_id))

        with database.transaction() as session:
            remaining = session.execute(select(Enrollment)).scalars().all()
            assert remaining == []
            assert session.get(Student, "1234567890") is not None


@pytest.mark.integration
class TestTransaction:
    """Tests for Database.transaction."""

    def test_rollback_on_error(self, database: Database) -> None:
        with pytest.raises(RuntimeError), database.transaction() as session:
            session.add(Student(ssn="5555555555", name="Rolled Back"))
            session.flush()
            raise RuntimeError("boom")

        with database.transaction() as session:
            assert session.get(Student, "5555555555") is None
