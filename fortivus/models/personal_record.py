from __future__ import annotations

from datetime import datetime
from sqlalchemy import DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fortivus.core.db import Base


class PersonalRecord(Base):
    """Append-only: a new row per PR, never updated in place."""

    __tablename__ = "personal_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id"),
        index=True,
        nullable=False,
    )
    session_id: Mapped[int | None] = mapped_column(
        ForeignKey("workout_sessions.id", ondelete="SET NULL"),
        nullable=True,
    )

    record_type: Mapped[str] = mapped_column(String(20), nullable=False, default="weight")
    value: Mapped[float] = mapped_column(Float, nullable=False)
    reps_at_weight: Mapped[int | None] = mapped_column(Integer, nullable=True)

    achieved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
