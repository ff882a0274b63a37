from __future__ import annotations

from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from fortivus.core.db import Base


class TemplateExercise(Base):
    __tablename__ = "template_exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    template_id: Mapped[int] = mapped_column(
        ForeignKey("workout_templates.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id"),
        index=True,
        nullable=False,
    )

    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    target_sets: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    target_reps: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    rest_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=90)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
