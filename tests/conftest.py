"""Shared pytest fixtures and configuration."""

from datetime import date

import pytest

from coursesapi.registry import CourseDetails, CourseRegistry


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def registry() -> CourseRegistry:
    """Create an in-memory CourseRegistry."""
    r = CourseRegistry(":memory:")
    yield r
    r.close()


@pytest.fixture
def make_course(registry: CourseRegistry):
    """Factory creating a course (and its template on first use)."""
    templates: set[str] = set()

    def _make(
        max_students: int = 10,
        template_id: str = "T-514-VEFT",
        name: str = "Web Services",
        semester: str = "20173",
    ) -> CourseDetails:
        if template_id not in templates:
            registry.create_template(template_id=template_id, name=name)
            templates.add(template_id)
        return registry.add_course(
            template_id=template_id,
            semester=semester,
            start_date=date(2017, 8, 17),
            end_date=date(2017, 11, 10),
            max_students=max_students,
        )

    return _make


@pytest.fixture
def students(registry: CourseRegistry) -> list[str]:
    """Register three students and return their SSNs."""
    people = [
        ("1234567890", "Herp McDerpsson"),
        ("9876543210", "Herpina Derpy"),
        ("1122334455", "Flip Flipsson"),
    ]
    for ssn, name in people:
        registry.create_student(ssn=ssn, name=name)
    return [ssn for ssn, _ in people]
