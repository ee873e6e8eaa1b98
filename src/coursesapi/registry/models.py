"""SQLAlchemy models for the course registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class EnrollmentStatus(StrEnum):
    """Relation of a student to a course.

    A missing row means the student is not associated with the course.
    """

    ENROLLED = "enrolled"
    REMOVED = "removed"
    WAITLISTED = "waitlisted"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class CourseTemplate(Base):
    """Course template model - the catalogue entry a course is taught from."""

    __tablename__ = "course_templates"

    template_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    courses: Mapped[list[Course]] = relationship("Course", back_populates="template")

    def __init__(self, template_id: str, name: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.template_id = template_id
        self.name = name

    def __repr__(self) -> str:
        return f"<CourseTemplate(template_id={self.template_id!r}, name={self.name!r})>"


class Course(Base):
    """Course model - one offering of a template in a semester."""

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    template_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("course_templates.template_id"), nullable=False
    )
    semester: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    template: Mapped[CourseTemplate] = relationship("CourseTemplate", back_populates="courses")
    enrollments: Mapped[list[Enrollment]] = relationship(
        "Enrollment", back_populates="course", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        template_id: str,
        semester: str,
        start_date: date,
        end_date: date,
        max_students: int,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.template_id = template_id
        self.semester = semester
        self.start_date = start_date
        self.end_date = end_date
        self.max_students = max_students

    def __repr__(self) -> str:
        return (
            f"<Course(id={self.id!r}, template_id={self.template_id!r}, "
            f"semester={self.semester!r})>"
        )


class Student(Base):
    """Student model - identified by SSN."""

    __tablename__ = "students"

    ssn: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    enrollments: Mapped[list[Enrollment]] = relationship("Enrollment", back_populates="student")

    def __init__(self, ssn: str, name: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.ssn = ssn
        self.name = name

    def __repr__(self) -> str:
        return f"<Student(ssn={self.ssn!r}, name={self.name!r})>"


class Enrollment(Base):
    """Enrollment model - the single relation between a student and a course.

    One row per (course, student) pair. Removal flips the status to REMOVED
    instead of deleting the row, so a later enrollment reuses it. A waiting
    list entry is a row in the WAITLISTED state.
    """

    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("course_id", "student_ssn", name="uq_enrollment_pair"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_ssn: Mapped[str] = mapped_column(
        String(20), ForeignKey("students.ssn"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    waitlisted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    course: Mapped[Course] = relationship("Course", back_populates="enrollments")
    student: Mapped[Student] = relationship("Student", back_populates="enrollments")

    def __init__(
        self,
        course_id: int,
        student_ssn: str,
        status: str | None = None,
        waitlisted_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.course_id = course_id
        self.student_ssn = student_ssn
        self.status = status if status is not None else EnrollmentStatus.ENROLLED.value
        self.waitlisted_at = waitlisted_at

    @property
    def enrollment_status(self) -> EnrollmentStatus:
        """Get status as EnrollmentStatus enum."""
        return EnrollmentStatus(self.status)

    @enrollment_status.setter
    def enrollment_status(self, value: EnrollmentStatus) -> None:
        """Set status from EnrollmentStatus enum."""
        self.status = value.value

    @property
    def active(self) -> bool:
        """True while the student occupies a seat."""
        return self.status == EnrollmentStatus.ENROLLED.value

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id!r}, course_id={self.course_id!r}, "
            f"student_ssn={self.student_ssn!r}, status={self.status!r})>"
        )


@dataclass
class StudentRecord:
    """Identity/name projection of a student."""

    ssn: str
    name: str


@dataclass
class CourseListItem:
    """Course listing row with its active enrollment count."""

    id: int
    name: str
    number_of_students: int


@dataclass
class CourseDetails:
    """Full course detail including the active roster."""

    id: int
    template_id: str
    name: str
    semester: str
    start_date: date
    end_date: date
    max_students: int
    students: list[StudentRecord] = field(default_factory=list)
