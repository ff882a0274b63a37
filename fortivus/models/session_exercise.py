from __future__ import annotations

from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from fortivus.core.db import Base


class SessionExercise(Base):
    __tablename__ = "session_exercises"
    __table_args__ = (UniqueConstraint("session_id", "exercise_id", name="uq_session_exercises_session_exercise"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[int] = mapped_column(
        ForeignKey("workout_sessions.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id"),
        index=True,
        nullable=False,
    )

    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # If this exercise was created from a template, store the template entry id
    source_template_exercise_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
