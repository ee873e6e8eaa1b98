"""REST API for the course registry."""

from coursesapi.api.app import app, create_app
from coursesapi.api.models import (
    APIResponse,
    CourseCreate,
    CourseDetailsResponse,
    CourseUpdate,
    StudentResponse,
)

__all__ = [
    "APIResponse",
    "CourseCreate",
    "CourseDetailsResponse",
    "CourseUpdate",
    "StudentResponse",
    "app",
    "create_app",
]
