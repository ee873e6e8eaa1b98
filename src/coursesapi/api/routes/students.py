"""Student endpoints."""

from fastapi import APIRouter, status

from coursesapi.api.dependencies import RegistryDep
from coursesapi.api.models import (
    APIResponse,
    StudentCreate,
    StudentResponse,
    student_to_response,
)

router = APIRouter(prefix="/students", tags=["students"])


@router.get("", response_model=APIResponse[list[StudentResponse]])
def list_students(registry: RegistryDep) -> APIResponse[list[StudentResponse]]:
    """List all students."""
    students = registry.list_students()
    return APIResponse(data=[student_to_response(s) for s in students])


@router.post(
    "",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_student(student: StudentCreate, registry: RegistryDep) -> APIResponse[StudentResponse]:
    """Register a student."""
    created = registry.create_student(ssn=student.ssn, name=student.name)
    return APIResponse(data=student_to_response(created))


@router.get("/{ssn}", response_model=APIResponse[StudentResponse])
def get_student(ssn: str, registry: RegistryDep) -> APIResponse[StudentResponse]:
    """Get a student by SSN."""
    student = registry.get_student(ssn)
    return APIResponse(data=student_to_response(student))
