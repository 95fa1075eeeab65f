"""Expose ORM models at package level (e.g. `from models import Project`)."""

from .base import Base  # noqa: F401
from .projects import Project  # noqa: F401
