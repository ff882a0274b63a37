from __future__ import annotations

from datetime import datetime
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from fortivus.core.db import Base


MUSCLE_GROUPS = (
    "chest",
    "back",
    "shoulders",
    "biceps",
    "triceps",
    "quadriceps",
    "hamstrings",
    "glutes",
    "calves",
    "core",
    "full_body",
)

EQUIPMENT = (
    "bodyweight",
    "dumbbells",
    "barbell",
    "kettlebell",
    "machine",
    "cable",
    "bands",
)


def normalize_name(name: str) -> str:
    return " ".join(name.split()).lower()


class Exercise(Base):
    """Shared exercise catalog entry, visible to every user."""

    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    # Uniqueness lives here so concurrent creates of the same name collapse to one row
    name_normalized: Mapped[str] = mapped_column(String(120), unique=True, index=True, nullable=False)

    muscle_group: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    equipment: Mapped[str] = mapped_column(String(30), nullable=False)

    is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
