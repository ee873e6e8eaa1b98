"""Course Registry - Persistent storage and enrollment rules for courses."""

from coursesapi.registry.exceptions import (
    AlreadyEnrolledError,
    AlreadyWaitlistedError,
    CourseFullError,
    CourseNotFoundError,
    InvalidCourseError,
    NotEnrolledError,
    RegistryError,
    StudentExistsError,
    StudentNotFoundError,
    TemplateExistsError,
    TemplateNotFoundError,
)
from coursesapi.registry.models import (
    Course,
    CourseDetails,
    CourseListItem,
    CourseTemplate,
    Enrollment,
    EnrollmentStatus,
    Student,
    StudentRecord,
)
from coursesapi.registry.store import CourseRegistry

__all__ = [
    "AlreadyEnrolledError",
    "AlreadyWaitlistedError",
    "Course",
    "CourseDetails",
    "CourseFullError",
    "CourseListItem",
    "CourseNotFoundError",
    "CourseRegistry",
    "CourseTemplate",
    "Enrollment",
    "EnrollmentStatus",
    "InvalidCourseError",
    "NotEnrolledError",
    "RegistryError",
    "Student",
    "StudentExistsError",
    "StudentNotFoundError",
    "StudentRecord",
    "TemplateExistsError",
    "TemplateNotFoundError",
]
