"""Course template endpoints."""

from fastapi import APIRouter, status

from coursesapi.api.dependencies import RegistryDep
from coursesapi.api.models import (
    APIResponse,
    TemplateCreate,
    TemplateResponse,
    template_to_response,
)

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=APIResponse[list[TemplateResponse]])
def list_templates(registry: RegistryDep) -> APIResponse[list[TemplateResponse]]:
    """List all course templates."""
    templates = registry.list_templates()
    return APIResponse(data=[template_to_response(t) for t in templates])


@router.post(
    "",
    response_model=APIResponse[TemplateResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_template(
    template: TemplateCreate, registry: RegistryDep
) -> APIResponse[TemplateResponse]:
    """Create a course template."""
    created = registry.create_template(template_id=template.template_id, name=template.name)
    return APIResponse(data=template_to_response(created))
