"""Pydantic models for REST API."""

from datetime import date
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Student models


class StudentCreate(BaseModel):
    """Request model for registering a student."""

    ssn: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)


class StudentRef(BaseModel):
    """Request model naming an existing student (enrollment, waiting list)."""

    ssn: str = Field(..., min_length=1, max_length=20)


class StudentResponse(BaseModel):
    """Response model for a student."""

    model_config = ConfigDict(from_attributes=True)

    ssn: str
    name: str


def student_to_response(student: Any) -> StudentResponse:
    """Convert a StudentRecord to StudentResponse."""
    return StudentResponse.model_validate(student)


# Template models


class TemplateCreate(BaseModel):
    """Request model for creating a course template."""

    template_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)


class TemplateResponse(BaseModel):
    """Response model for a course template."""

    model_config = ConfigDict(from_attributes=True)

    template_id: str
    name: str


def template_to_response(template: Any) -> TemplateResponse:
    """Convert a CourseTemplate model to TemplateResponse."""
    return TemplateResponse.model_validate(template)


# Course models


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    template_id: str = Field(..., min_length=1, max_length=50)
    semester: str = Field(..., min_length=1, max_length=10)
    start_date: date
    end_date: date
    max_students: int = Field(..., ge=1)


class CourseUpdate(BaseModel):
    """Request model for updating a course (dates and capacity)."""

    start_date: date
    end_date: date
    max_students: int = Field(..., ge=1)


class CourseListItemResponse(BaseModel):
    """Response model for a course in a semester listing."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    number_of_students: int


def course_list_item_to_response(item: Any) -> CourseListItemResponse:
    """Convert a CourseListItem to CourseListItemResponse."""
    return CourseListItemResponse.model_validate(item)


class CourseDetailsResponse(BaseModel):
    """Response model for a single course with its roster."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    template_id: str
    name: str
    semester: str
    start_date: date
    end_date: date
    max_students: int
    students: list[StudentResponse]


def course_details_to_response(details: Any) -> CourseDetailsResponse:
    """Convert a CourseDetails to CourseDetailsResponse."""
    return CourseDetailsResponse.model_validate(details)
