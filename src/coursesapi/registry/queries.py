"""Read-only course projections.

Like the rules module, every function takes the session it reads from.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from coursesapi.registry import rules
from coursesapi.registry.models import (
    Course,
    CourseDetails,
    CourseListItem,
    CourseTemplate,
    Enrollment,
    EnrollmentStatus,
    StudentRecord,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def list_courses(session: Session, semester: str) -> list[CourseListItem]:
    """List the courses of a semester with their active enrollment counts.

    Args:
        session: Active session
        semester: Semester tag, e.g. "20173"

    Returns:
        Courses ordered by name, then ID. Empty for an unknown semester.
    """
    seats = (
        select(
            Enrollment.course_id.label("course_id"),
            func.count(Enrollment.id).label("taken"),
        )
        .where(Enrollment.status == EnrollmentStatus.ENROLLED.value)
        .group_by(Enrollment.course_id)
        .subquery()
    )
    stmt = (
        select(
            Course.id,
            CourseTemplate.name,
            func.coalesce(seats.c.taken, 0).label("taken"),
        )
        .join(CourseTemplate, CourseTemplate.template_id == Course.template_id)
        .outerjoin(seats, seats.c.course_id == Course.id)
        .where(Course.semester == semester)
        .order_by(CourseTemplate.name, Course.id)
    )
    return [
        CourseListItem(id=row.id, name=row.name, number_of_students=row.taken)
        for row in session.execute(stmt)
    ]


def get_course_details(session: Session, course_id: int) -> CourseDetails:
    """Get a course with its template name and active roster.

    Raises:
        CourseNotFoundError: If the course doesn't exist
    """
    course = rules.get_course(session, course_id)
    return CourseDetails(
        id=course.id,
        template_id=course.template_id,
        name=course.template.name,
        semester=course.semester,
        start_date=course.start_date,
        end_date=course.end_date,
        max_students=course.max_students,
        students=rules.get_roster(session, course.id),
    )


def get_course_students(session: Session, course_id: int) -> list[StudentRecord]:
    """Get the active roster of a course."""
    return rules.get_roster(session, course_id)
