"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from coursesapi.registry import CourseRegistry

# Global CourseRegistry instance (initialized on app startup)
_registry: CourseRegistry | None = None


def init_registry(db_path: str = "coursesapi.db") -> CourseRegistry:
    """Initialize the global CourseRegistry instance."""
    global _registry  # noqa: PLW0603
    _registry = CourseRegistry(db_path)
    return _registry


def close_registry() -> None:
    """Close the global CourseRegistry instance."""
    global _registry  # noqa: PLW0603
    if _registry is not None:
        _registry.close()
        _registry = None


def get_registry() -> Generator[CourseRegistry, None, None]:
    """Dependency that provides the CourseRegistry instance."""
    if _registry is None:
        raise RuntimeError("CourseRegistry not initialized. Call init_registry() first.")
    yield _registry


# Type alias for dependency injection
RegistryDep = Annotated[CourseRegistry, Depends(get_registry)]
