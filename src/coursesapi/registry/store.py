"""CourseRegistry - Main API for course registry operations."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from coursesapi.registry import queries, rules
from coursesapi.registry.database import Database
from coursesapi.registry.exceptions import (
    InvalidCourseError,
    RegistryError,
    StudentExistsError,
    TemplateExistsError,
    TemplateNotFoundError,
)
from coursesapi.registry.models import (
    Course,
    CourseDetails,
    CourseListItem,
    CourseTemplate,
    Student,
    StudentRecord,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import date

logger = logging.getLogger(__name__)


def _validate_course(start_date: date, end_date: date, max_students: int) -> None:
    if max_students < 1:
        raise InvalidCourseError(f"max_students must be at least 1, got {max_students}")
    if end_date < start_date:
        raise InvalidCourseError(f"end_date {end_date} is before start_date {start_date}")


class CourseRegistry:
    """Main API for course registry operations.

    Every public method runs in its own transaction. Enrollment and waiting
    list changes additionally hold a per-course lock for the whole
    read-check-write, so two callers can't both take the last seat.
    Different courses never share a lock.
    """

    def __init__(self, db_path: str = "coursesapi.db") -> None:
        """Initialize the registry with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        self._db.create_tables()
        self._locks_guard = threading.Lock()
        # course id -> (lock, callers holding or waiting for it)
        self._course_locks: dict[int, tuple[threading.Lock, int]] = {}

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def _course_lock(self, course_id: int) -> Iterator[None]:
        """Hold the lock of one course.

        Entries are dropped once no caller holds or waits for them, so the
        table only ever contains courses with calls in flight.
        """
        with self._locks_guard:
            entry = self._course_locks.get(course_id)
            lock, users = entry if entry is not None else (threading.Lock(), 0)
            self._course_locks[course_id] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, users = self._course_locks[course_id]
                if users == 1:
                    del self._course_locks[course_id]
                else:
                    self._course_locks[course_id] = (lock, users - 1)

    # --- Template Operations ---

    def create_template(self, template_id: str, name: str) -> CourseTemplate:
        """Create a course template.

        Raises:
            TemplateExistsError: If a template with this ID already exists
        """
        try:
            with self._db.transaction() as session:
                if session.get(CourseTemplate, template_id) is not None:
                    raise TemplateExistsError(f"Template with id '{template_id}' already exists")
                template = CourseTemplate(template_id=template_id, name=name)
                session.add(template)
        except IntegrityError as e:
            raise TemplateExistsError(f"Template with id '{template_id}' already exists") from e
        logger.info("Created template %s (%s)", template_id, name)
        return template

    def list_templates(self) -> list[CourseTemplate]:
        """List all templates, ordered by ID."""
        with self._db.transaction() as session:
            stmt = select(CourseTemplate).order_by(CourseTemplate.template_id)
            return list(session.execute(stmt).scalars().all())

    # --- Student Operations ---

    def create_student(self, ssn: str, name: str) -> StudentRecord:
        """Register a student.

        Args:
            ssn: The student's SSN
            name: The student's full name

        Returns:
            The created student

        Raises:
            StudentExistsError: If a student with this SSN already exists
        """
        try:
            with self._db.transaction() as session:
                if session.get(Student, ssn) is not None:
                    raise StudentExistsError(f"Student with ssn '{ssn}' already exists")
                session.add(Student(ssn=ssn, name=name))
        except IntegrityError as e:
            raise StudentExistsError(f"Student with ssn '{ssn}' already exists") from e
        logger.info("Created student %s", ssn)
        return StudentRecord(ssn=ssn, name=name)

    def get_student(self, ssn: str) -> StudentRecord:
        """Get a student by SSN.

        Raises:
            StudentNotFoundError: If the student doesn't exist
        """
        with self._db.transaction() as session:
            student = rules.get_student(session, ssn)
            return StudentRecord(ssn=student.ssn, name=student.name)

    def list_students(self) -> list[StudentRecord]:
        """List all students, ordered by name."""
        with self._db.transaction() as session:
            stmt = select(Student).order_by(Student.name, Student.ssn)
            return [
                StudentRecord(ssn=s.ssn, name=s.name) for s in session.execute(stmt).scalars()
            ]

    # --- Course Operations ---

    def add_course(
        self,
        template_id: str,
        semester: str,
        start_date: date,
        end_date: date,
        max_students: int,
    ) -> CourseDetails:
        """Create a course from a template.

        Args:
            template_id: The template the course is taught from
            semester: Semester tag, e.g. "20173"
            start_date: First day of the course
            end_date: Last day of the course
            max_students: Seat capacity, at least 1

        Returns:
            Details of the created course (empty roster)

        Raises:
            TemplateNotFoundError: If the template doesn't exist
            InvalidCourseError: If dates or capacity are invalid
        """
        _validate_course(start_date, end_date, max_students)
        with self._db.transaction() as session:
            if session.get(CourseTemplate, template_id) is None:
                raise TemplateNotFoundError(f"Template with id '{template_id}' not found")
            course = Course(
                template_id=template_id,
                semester=semester,
                start_date=start_date,
                end_date=end_date,
                max_students=max_students,
            )
            session.add(course)
            session.flush()
            details = queries.get_course_details(session, course.id)
        logger.info("Created course %s (%s, %s)", details.id, template_id, semester)
        return details

    def update_course(
        self,
        course_id: int,
        start_date: date,
        end_date: date,
        max_students: int,
    ) -> CourseDetails:
        """Update a course's dates and capacity.

        Lowering the capacity below the current roster size is allowed; it
        only blocks further enrollments.

        Raises:
            CourseNotFoundError: If the course doesn't exist
            InvalidCourseError: If dates or capacity are invalid
        """
        _validate_course(start_date, end_date, max_students)
        with self._course_lock(course_id), self._db.transaction() as session:
            course = rules.get_course(session, course_id, for_update=True)
            course.start_date = start_date
            course.end_date = end_date
            course.max_students = max_students
            session.flush()
            details = queries.get_course_details(session, course.id)
        logger.info("Updated course %s (max_students=%d)", course_id, max_students)
        return details

    def delete_course(self, course_id: int) -> None:
        """Delete a course together with its enrollments and waiting list.

        Raises:
            CourseNotFoundError: If the course doesn't exist
        """
        with self._course_lock(course_id), self._db.transaction() as session:
            course = rules.get_course(session, course_id, for_update=True)
            session.delete(course)
        logger.info("Deleted course %s", course_id)

    def list_courses(self, semester: str) -> list[CourseListItem]:
        """List the courses of a semester with enrollment counts."""
        with self._db.transaction() as session:
            return queries.list_courses(session, semester)

    def get_course(self, course_id: int) -> CourseDetails:
        """Get a course with its active roster.

        Raises:
            CourseNotFoundError: If the course doesn't exist
        """
        with self._db.transaction() as session:
            return queries.get_course_details(session, course_id)

    def get_course_students(self, course_id: int) -> list[StudentRecord]:
        """Get the active roster of a course.

        Raises:
            CourseNotFoundError: If the course doesn't exist
        """
        with self._db.transaction() as session:
            return queries.get_course_students(session, course_id)

    # --- Enrollment Operations ---

    def enroll_student(self, course_id: int, ssn: str) -> StudentRecord:
        """Enroll a student in a course. See rules.enroll_student."""
        with self._course_lock(course_id):
            try:
                with self._db.transaction() as session:
                    record = rules.enroll_student(session, course_id, ssn)
            except RegistryError as e:
                logger.info(
                    "Enrollment of %s in course %s rejected: %s",
                    ssn,
                    course_id,
                    type(e).__name__,
                )
                raise
        logger.info("Enrolled %s in course %s", ssn, course_id)
        return record

    def remove_student(self, course_id: int, ssn: str) -> None:
        """Soft-remove a student from a course. See rules.remove_student."""
        with self._course_lock(course_id):
            try:
                with self._db.transaction() as session:
                    rules.remove_student(session, course_id, ssn)
            except RegistryError as e:
                logger.info(
                    "Removal of %s from course %s rejected: %s",
                    ssn,
                    course_id,
                    type(e).__name__,
                )
                raise
        logger.info("Removed %s from course %s", ssn, course_id)

    def add_to_waiting_list(self, course_id: int, ssn: str) -> StudentRecord:
        """Put a student on a waiting list. See rules.add_to_waiting_list."""
        with self._course_lock(course_id):
            try:
                with self._db.transaction() as session:
                    record = rules.add_to_waiting_list(session, course_id, ssn)
            except RegistryError as e:
                logger.info(
                    "Waiting list entry of %s for course %s rejected: %s",
                    ssn,
                    course_id,
                    type(e).__name__,
                )
                raise
        logger.info("Added %s to waiting list of course %s", ssn, course_id)
        return record

    def get_waiting_list(self, course_id: int) -> list[StudentRecord]:
        """Get a course's waiting list in arrival order.

        Raises:
            CourseNotFoundError: If the course doesn't exist
        """
        with self._db.transaction() as session:
            return rules.get_waiting_list(session, course_id)
