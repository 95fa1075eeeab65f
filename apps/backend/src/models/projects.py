"""Project model: a user's idea and the blueprint generated for it."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, UUID, CheckConstraint, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Project(Base):
    """A generation record.

    ``blueprint`` is only ever non-null while ``status`` is ``complete``; the
    check constraint backs up the rule enforced by the generation controller.
    """

    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint(
            "(status = 'complete') = (blueprint IS NOT NULL)",
            name="ck_projects_blueprint_iff_complete",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4
    )
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str] = mapped_column(
        Text, nullable=False, comment="The user's free-text project idea"
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
        comment="pending | streaming | complete | error (legacy: generating)",
    )
    blueprint: Mapped[Any | None] = mapped_column(
        JSON(none_as_null=True),
        nullable=True,
        comment="Parsed blueprint JSON object",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, status={self.status})>"
