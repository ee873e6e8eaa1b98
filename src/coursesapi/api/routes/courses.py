"""Course, roster and waiting list endpoints."""

from fastapi import APIRouter, Query, Request, status

from coursesapi.api.dependencies import RegistryDep
from coursesapi.api.models import (
    APIResponse,
    CourseCreate,
    CourseDetailsResponse,
    CourseListItemResponse,
    CourseUpdate,
    StudentRef,
    StudentResponse,
    course_details_to_response,
    course_list_item_to_response,
    student_to_response,
)
from coursesapi.config import DEFAULT_SEMESTER

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[list[CourseListItemResponse]])
def list_courses(
    request: Request,
    registry: RegistryDep,
    semester: str | None = Query(default=None, description="Semester tag, e.g. 20173"),
) -> APIResponse[list[CourseListItemResponse]]:
    """List the courses of a semester (the configured default if omitted)."""
    if semester is None:
        semester = getattr(request.app.state, "default_semester", DEFAULT_SEMESTER)
    courses = registry.list_courses(semester)
    return APIResponse(data=[course_list_item_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseDetailsResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_course(course: CourseCreate, registry: RegistryDep) -> APIResponse[CourseDetailsResponse]:
    """Create a course from a template."""
    created = registry.add_course(
        template_id=course.template_id,
        semester=course.semester,
        start_date=course.start_date,
        end_date=course.end_date,
        max_students=course.max_students,
    )
    return APIResponse(data=course_details_to_response(created))


@router.get("/{course_id}", response_model=APIResponse[CourseDetailsResponse])
def get_course(course_id: int, registry: RegistryDep) -> APIResponse[CourseDetailsResponse]:
    """Get a course with its active roster."""
    details = registry.get_course(course_id)
    return APIResponse(data=course_details_to_response(details))


@router.put("/{course_id}", response_model=APIResponse[CourseDetailsResponse])
def update_course(
    course_id: int, course: CourseUpdate, registry: RegistryDep
) -> APIResponse[CourseDetailsResponse]:
    """Update a course's dates and capacity."""
    updated = registry.update_course(
        course_id,
        start_date=course.start_date,
        end_date=course.end_date,
        max_students=course.max_students,
    )
    return APIResponse(data=course_details_to_response(updated))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: int, registry: RegistryDep) -> None:
    """Delete a course and everything enrolled in it."""
    registry.delete_course(course_id)


# Roster


@router.get("/{course_id}/students", response_model=APIResponse[list[StudentResponse]])
def get_course_students(
    course_id: int, registry: RegistryDep
) -> APIResponse[list[StudentResponse]]:
    """List the students actively enrolled in a course."""
    students = registry.get_course_students(course_id)
    return APIResponse(data=[student_to_response(s) for s in students])


@router.post(
    "/{course_id}/students",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def enroll_student(
    course_id: int, student: StudentRef, registry: RegistryDep
) -> APIResponse[StudentResponse]:
    """Enroll an existing student in a course."""
    enrolled = registry.enroll_student(course_id, student.ssn)
    return APIResponse(data=student_to_response(enrolled))


@router.delete("/{course_id}/students/{ssn}", status_code=status.HTTP_204_NO_CONTENT)
def remove_student(course_id: int, ssn: str, registry: RegistryDep) -> None:
    """Remove a student from a course."""
    registry.remove_student(course_id, ssn)


# Waiting list


@router.get("/{course_id}/waitinglist", response_model=APIResponse[list[StudentResponse]])
def get_waiting_list(course_id: int, registry: RegistryDep) -> APIResponse[list[StudentResponse]]:
    """List a course's waiting list in arrival order."""
    students = registry.get_waiting_list(course_id)
    return APIResponse(data=[student_to_response(s) for s in students])


@router.post(
    "/{course_id}/waitinglist",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_to_waiting_list(
    course_id: int, student: StudentRef, registry: RegistryDep
) -> APIResponse[StudentResponse]:
    """Put an existing student on a course's waiting list."""
    waiting = registry.add_to_waiting_list(course_id, student.ssn)
    return APIResponse(data=student_to_response(waiting))
