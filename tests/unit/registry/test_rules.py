"""Unit tests for the enrollment rules, driven through an explicit session."""

from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from coursesapi.registry import rules
from coursesapi.registry.database import Database
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
    CourseTemplate,
    Enrollment,
    EnrollmentStatus,
    Student,
    StudentRecord,
)


@pytest.fixture
def session() -> Session:
    """Session on a fresh in-memory database."""
    db = Database(":memory:")
    db.create_tables()
    s = db.get_session()
    yield s
    s.close()
    db.close()


@pytest.fixture
def course(session: Session) -> Course:
    """A course with two seats and three registered students."""
    session.add(CourseTemplate(template_id="T-514-VEFT", name="Web Services"))
    course = Course(
        template_id="T-514-VEFT",
        semester="20173",
        start_date=date(2017, 8, 17),
        end_date=date(2017, 11, 10),
        max_students=2,
    )
    session.add(course)
    session.add_all(
        [
            Student(ssn="S1", name="Alice"),
            Student(ssn="S2", name="Bob"),
            Student(ssn="S3", name="Carol"),
        ]
    )
    session.commit()
    return course


def _rows(session: Session, course_id: int, ssn: str) -> int:
    stmt = select(func.count(Enrollment.id)).where(
        Enrollment.course_id == course_id, Enrollment.student_ssn == ssn
    )
    return session.execute(stmt).scalar_one()


@pytest.mark.unit
class TestLookups:
    """Tests for get_course / get_student."""

    def test_get_course_missing_raises(self, session: Session) -> None:
        with pytest.raises(CourseNotFoundError) as exc_info:
            rules.get_course(session, 999)

        assert "999" in str(exc_info.value)

    def test_get_course_for_update(self, session: Session, course: Course) -> None:
        """FOR UPDATE is accepted (a no-op on SQLite)."""
        assert rules.get_course(session, course.id, for_update=True).id == course.id

    def test_get_student_missing_raises(self, session: Session) -> None:
        with pytest.raises(StudentNotFoundError) as exc_info:
            rules.get_student(session, "nobody")

        assert "nobody" in str(exc_info.value)


@pytest.mark.unit
class TestEnrollStudent:
    """Tests for rules.enroll_student."""

    def test_enroll_creates_active_row(self, session: Session, course: Course) -> None:
        record = rules.enroll_student(session, course.id, "S1")

        assert record == StudentRecord(ssn="S1", name="Alice")
        enrollment = rules.find_enrollment(session, course.id, "S1")
        assert enrollment is not None
        assert enrollment.active
        assert rules.active_enrollment_count(session, course.id) == 1

    def test_missing_course_checked_before_student(self, session: Session) -> None:
        """Both missing: the course is reported."""
        with pytest.raises(CourseNotFoundError):
            rules.enroll_student(session, 999, "nobody")

    def test_missing_student_raises(self, session: Session, course: Course) -> None:
        with pytest.raises(StudentNotFoundError):
            rules.enroll_student(session, course.id, "nobody")

        assert rules.active_enrollment_count(session, course.id) == 0

    def test_enroll_twice_raises_already_enrolled(
        self, session: Session, course: Course
    ) -> None:
        rules.enroll_student(session, course.id, "S1")

        with pytest.raises(AlreadyEnrolledError):
            rules.enroll_student(session, course.id, "S1")

        assert _rows(session, course.id, "S1") == 1

    def test_full_course_raises(self, session: Session, course: Course) -> None:
        rules.enroll_student(session, course.id, "S1")
        rules.enroll_student(session, course.id, "S2")

        with pytest.raises(CourseFullError):
            rules.enroll_student(session, course.id, "S3")

        assert rules.active_enrollment_count(session, course.id) == 2
        assert rules.find_enrollment(session, course.id, "S3") is None

    def test_capacity_checked_before_duplicate(self, session: Session, course: Course) -> None:
        """An enrolled student retrying against a full course gets CourseFullError."""
        rules.enroll_student(session, course.id, "S1")
        rules.enroll_student(session, course.id, "S2")

        with pytest.raises(CourseFullError):
            rules.enroll_student(session, course.id, "S1")

    def test_reenroll_reuses_row(self, session: Session, course: Course) -> None:
        """Enroll -> Remove -> Enroll keeps the original row identity."""
        rules.enroll_student(session, course.id, "S1")
        original_id = rules.find_enrollment(session, course.id, "S1").id
        rules.remove_student(session, course.id, "S1")

        rules.enroll_student(session, course.id, "S1")

        enrollment = rules.find_enrollment(session, course.id, "S1")
        assert enrollment.id == original_id
        assert enrollment.active
        assert _rows(session, course.id, "S1") == 1

    def test_enroll_dequeues_waitlisted_student(self, session: Session, course: Course) -> None:
        rules.add_to_waiting_list(session, course.id, "S1")
        waiting_id = rules.find_enrollment(session, course.id, "S1").id

        rules.enroll_student(session, course.id, "S1")

        assert rules.get_waiting_list(session, course.id) == []
        enrollment = rules.find_enrollment(session, course.id, "S1")
        assert enrollment.id == waiting_id
        assert enrollment.active
        assert enrollment.waitlisted_at is None

    def test_waitlisted_student_cannot_enroll_in_full_course(
        self, session: Session, course: Course
    ) -> None:
        rules.enroll_student(session, course.id, "S1")
        rules.enroll_student(session, course.id, "S2")
        rules.add_to_waiting_list(session, course.id, "S3")

        with pytest.raises(CourseFullError):
            rules.enroll_student(session, course.id, "S3")

        assert rules.get_waiting_list(session, course.id) == [
            StudentRecord(ssn="S3", name="Carol")
        ]


@pytest.mark.unit
class TestRemoveStudent:
    """Tests for rules.remove_student."""

    def test_remove_soft_deletes(self, session: Session, course: Course) -> None:
        rules.enroll_student(session, course.id, "S1")

        rules.remove_student(session, course.id, "S1")

        enrollment = rules.find_enrollment(session, course.id, "S1")
        assert enrollment is not None
        assert enrollment.enrollment_status == EnrollmentStatus.REMOVED
        assert rules.get_roster(session, course.id) == []

    def test_remove_twice_raises_not_enrolled(self, session: Session, course: Course) -> None:
        rules.enroll_student(session, course.id, "S1")
        rules.remove_student(session, course.id, "S1")

        with pytest.raises(NotEnrolledError):
            rules.remove_student(session, course.id, "S1")

    def test_remove_unassociated_raises(self, session: Session, course: Course) -> None:
        with pytest.raises(NotEnrolledError):
            rules.remove_student(session, course.id, "S1")

    def test_remove_waitlisted_raises_and_keeps_entry(
        self, session: Session, course: Course
    ) -> None:
        rules.add_to_waiting_list(session, course.id, "S1")

        with pytest.raises(NotEnrolledError):
            rules.remove_student(session, course.id, "S1")

        assert [s.ssn for s in rules.get_waiting_list(session, course.id)] == ["S1"]

    def test_remove_checks_course_then_student(self, session: Session, course: Course) -> None:
        with pytest.raises(CourseNotFoundError):
            rules.remove_student(session, 999, "nobody")
        with pytest.raises(StudentNotFoundError):
            rules.remove_student(session, course.id, "nobody")

    def test_remove_frees_seat(self, session: Session, course: Course) -> None:
        rules.enroll_student(session, course.id, "S1")
        rules.enroll_student(session, course.id, "S2")
        rules.remove_student(session, course.id, "S1")

        rules.enroll_student(session, course.id, "S3")

        assert rules.active_enrollment_count(session, course.id) == 2


@pytest.mark.unit
class TestWaitingList:
    """Tests for rules.add_to_waiting_list / get_waiting_list."""

    def test_add_to_waiting_list(self, session: Session, course: Course) -> None:
        record = rules.add_to_waiting_list(session, course.id, "S1")

        assert record == StudentRecord(ssn="S1", name="Alice")
        enrollment = rules.find_enrollment(session, course.id, "S1")
        assert enrollment.enrollment_status == EnrollmentStatus.WAITLISTED
        assert enrollment.waitlisted_at is not None
        assert rules.active_enrollment_count(session, course.id) == 0

    def test_waitlist_twice_raises(self, session: Session, course: Course) -> None:
        rules.add_to_waiting_list(session, course.id, "S1")

        with pytest.raises(AlreadyWaitlistedError):
            rules.add_to_waiting_list(session, course.id, "S1")

    def test_enrolled_student_cannot_waitlist(self, session: Session, course: Course) -> None:
        rules.enroll_student(session, course.id, "S1")

        with pytest.raises(AlreadyEnrolledError):
            rules.add_to_waiting_list(session, course.id, "S1")

        assert rules.get_waiting_list(session, course.id) == []

    def test_removed_student_can_waitlist(self, session: Session, course: Course) -> None:
        rules.enroll_student(session, course.id, "S1")
        original_id = rules.find_enrollment(session, course.id, "S1").id
        rules.remove_student(session, course.id, "S1")

        rules.add_to_waiting_list(session, course.id, "S1")

        enrollment = rules.find_enrollment(session, course.id, "S1")
        assert enrollment.id == original_id
        assert enrollment.enrollment_status == EnrollmentStatus.WAITLISTED

    def test_waiting_list_ignores_capacity(self, session: Session, course: Course) -> None:
        for ssn in ("S1", "S2", "S3"):
            rules.add_to_waiting_list(session, course.id, ssn)

        assert len(rules.get_waiting_list(session, course.id)) == 3

    def test_waiting_list_in_arrival_order(self, session: Session, course: Course) -> None:
        rules.add_to_waiting_list(session, course.id, "S3")
        rules.add_to_waiting_list(session, course.id, "S1")
        rules.add_to_waiting_list(session, course.id, "S2")

        assert [s.ssn for s in rules.get_waiting_list(session, course.id)] == ["S3", "S1", "S2"]

    def test_waiting_list_missing_course_raises(self, session: Session) -> None:
        with pytest.raises(CourseNotFoundError):
            rules.get_waiting_list(session, 999)

    def test_waitlist_missing_student_raises(self, session: Session, course: Course) -> None:
        with pytest.raises(StudentNotFoundError):
            rules.add_to_waiting_list(session, course.id, "nobody")


@pytest.mark.unit
class TestRoster:
    """Tests for rules.get_roster."""

    def test_roster_only_active_sorted_by_name(self, session: Session, course: Course) -> None:
        rules.enroll_student(session, course.id, "S2")
        rules.enroll_student(session, course.id, "S1")
        rules.remove_student(session, course.id, "S2")
        rules.add_to_waiting_list(session, course.id, "S3")

        assert rules.get_roster(session, course.id) == [StudentRecord(ssn="S1", name="Alice")]

    def test_roster_missing_course_raises(self, session: Session) -> None:
        with pytest.raises(CourseNotFoundError):
            rules.get_roster(session, 999)
