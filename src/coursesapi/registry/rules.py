"""Enrollment rules - the state transitions between a student and a course.

Every function takes the SQLAlchemy session it works in and never commits;
the caller owns the transaction. Existence checks always come first, course
before student, and happen before anything is written.

Transitions per (course, student) pair::

    (none)      --enroll-->   ENROLLED      --remove--> REMOVED
    REMOVED     --enroll-->   ENROLLED      (same row reactivated)
    (none)      --waitlist--> WAITLISTED
    REMOVED     --waitlist--> WAITLISTED
    WAITLISTED  --enroll-->   ENROLLED      (dequeued from the waiting list)

Capacity is checked before the already-enrolled check, so an enrolled
student retrying against a full course gets CourseFullError.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from coursesapi.registry.exceptions import (
    AlreadyEnrolledError,
    AlreadyWaitlistedError,
    CourseFullError,
    CourseNotFoundError,
    NotEnrolledError,
    StudentNotFoundError,
)
from coursesapi.registry.models import (
    Course,
    Enrollment,
    EnrollmentStatus,
    Student,
    StudentRecord,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _to_record(student: Student) -> StudentRecord:
    return StudentRecord(ssn=student.ssn, name=student.name)


# --- Lookups ---


def get_course(session: Session, course_id: int, for_update: bool = False) -> Course:
    """Load a course or fail.

    Args:
        session: Active session
        course_id: The course's ID
        for_update: Lock the course row for the rest of the transaction

    Returns:
        The Course object

    Raises:
        CourseNotFoundError: If the course doesn't exist
    """
    stmt = select(Course).where(Course.id == course_id)
    if for_update:
        stmt = stmt.with_for_update()
    course = session.execute(stmt).scalar_one_or_none()
    if course is None:
        raise CourseNotFoundError(f"Course with id '{course_id}' not found")
    return course


def get_student(session: Session, ssn: str) -> Student:
    """Load a student or fail.

    Raises:
        StudentNotFoundError: If the student doesn't exist
    """
    student = session.get(Student, ssn)
    if student is None:
        raise StudentNotFoundError(f"Student with ssn '{ssn}' not found")
    return student


def find_enrollment(session: Session, course_id: int, ssn: str) -> Enrollment | None:
    """Return the row for a (course, student) pair, if any."""
    stmt = select(Enrollment).where(
        Enrollment.course_id == course_id,
        Enrollment.student_ssn == ssn,
    )
    return session.execute(stmt).scalar_one_or_none()


def active_enrollment_count(session: Session, course_id: int) -> int:
    """Count students currently holding a seat in a course."""
    stmt = select(func.count(Enrollment.id)).where(
        Enrollment.course_id == course_id,
        Enrollment.status == EnrollmentStatus.ENROLLED.value,
    )
    return session.execute(stmt).scalar_one()


# --- Transitions ---


def enroll_student(session: Session, course_id: int, ssn: str) -> StudentRecord:
    """Give a student a seat in a course.

    A removed enrollment is reactivated in place and a waiting list entry is
    promoted in place, so the pair never gets a second row.

    Args:
        session: Active session
        course_id: The course's ID
        ssn: The student's SSN

    Returns:
        The enrolled student

    Raises:
        CourseNotFoundError: If the course doesn't exist
        StudentNotFoundError: If the student doesn't exist
        CourseFullError: If every seat is taken
        AlreadyEnrolledError: If the student already holds a seat
    """
    course = get_course(session, course_id, for_update=True)
    student = get_student(session, ssn)

    if active_enrollment_count(session, course.id) >= course.max_students:
        raise CourseFullError(
            f"Course '{course.id}' is full ({course.max_students} students)"
        )

    enrollment = find_enrollment(session, course.id, student.ssn)
    if enrollment is None:
        session.add(Enrollment(course_id=course.id, student_ssn=student.ssn))
    elif enrollment.active:
        raise AlreadyEnrolledError(
            f"Student '{student.ssn}' is already enrolled in course '{course.id}'"
        )
    else:
        enrollment.enrollment_status = EnrollmentStatus.ENROLLED
        enrollment.waitlisted_at = None

    session.flush()
    return _to_record(student)


def remove_student(session: Session, course_id: int, ssn: str) -> None:
    """Soft-remove a student from a course.

    The row is kept with status REMOVED. The waiting list is left alone and
    nobody is promoted into the freed seat.

    Raises:
        CourseNotFoundError: If the course doesn't exist
        StudentNotFoundError: If the student doesn't exist
        NotEnrolledError: If the student holds no seat in the course
    """
    course = get_course(session, course_id, for_update=True)
    student = get_student(session, ssn)

    enrollment = find_enrollment(session, course.id, student.ssn)
    if enrollment is None or not enrollment.active:
        raise NotEnrolledError(
            f"Student '{student.ssn}' is not enrolled in course '{course.id}'"
        )

    enrollment.enrollment_status = EnrollmentStatus.REMOVED
    session.flush()


def add_to_waiting_list(session: Session, course_id: int, ssn: str) -> StudentRecord:
    """Put a student on a course's waiting list.

    The waiting list is unbounded, no capacity check is made.

    Raises:
        CourseNotFoundError: If the course doesn't exist
        StudentNotFoundError: If the student doesn't exist
        AlreadyWaitlistedError: If the student is already waiting
        AlreadyEnrolledError: If the student already holds a seat
    """
    course = get_course(session, course_id, for_update=True)
    student = get_student(session, ssn)

    enrollment = find_enrollment(session, course.id, student.ssn)
    if enrollment is None:
        session.add(
            Enrollment(
                course_id=course.id,
                student_ssn=student.ssn,
                status=EnrollmentStatus.WAITLISTED.value,
                waitlisted_at=_utcnow(),
            )
        )
    elif enrollment.enrollment_status == EnrollmentStatus.WAITLISTED:
        raise AlreadyWaitlistedError(
            f"Student '{student.ssn}' is already on the waiting list for course '{course.id}'"
        )
    elif enrollment.active:
        raise AlreadyEnrolledError(
            f"Student '{student.ssn}' is already enrolled in course '{course.id}'"
        )
    else:
        enrollment.enrollment_status = EnrollmentStatus.WAITLISTED
        enrollment.waitlisted_at = _utcnow()

    session.flush()
    return _to_record(student)


# --- Projections ---


def get_waiting_list(session: Session, course_id: int) -> list[StudentRecord]:
    """Students waiting for a course, first come first served.

    Raises:
        CourseNotFoundError: If the course doesn't exist
    """
    course = get_course(session, course_id)
    stmt = (
        select(Student)
        .join(Enrollment, Enrollment.student_ssn == Student.ssn)
        .where(
            Enrollment.course_id == course.id,
            Enrollment.status == EnrollmentStatus.WAITLISTED.value,
        )
        .order_by(Enrollment.waitlisted_at, Enrollment.id)
    )
    return [_to_record(s) for s in session.execute(stmt).scalars()]


def get_roster(session: Session, course_id: int) -> list[StudentRecord]:
    """Students actively enrolled in a course, ordered by name.

    Raises:
        CourseNotFoundError: If the course doesn't exist
    """
    course = get_course(session, course_id)
    stmt = (
        select(Student)
        .join(Enrollment, Enrollment.student_ssn == Student.ssn)
        .where(
            Enrollment.course_id == course.id,
            Enrollment.status == EnrollmentStatus.ENROLLED.value,
        )
        .order_by(Student.name, Student.ssn)
    )
    return [_to_record(s) for s in session.execute(stmt).scalars()]
