from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StartSessionIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class AddExerciseIn(BaseModel):
    exercise_id: int


class AddSetIn(BaseModel):
    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)
    is_warmup: bool = False


class UpdateSetIn(BaseModel):
    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)


class CompleteSetIn(BaseModel):
    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)


class FinishSessionIn(BaseModel):
    notes: str | None = None


class SetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    exercise_id: int
    set_number: int
    weight: float | None = None
    reps: int | None = None
    is_warmup: bool
    is_completed: bool
    completed_at: datetime | None = None


class SessionExerciseOut(BaseModel):
    id: int
    exercise_id: int
    name: str
    order_index: int
    sets: list[SetOut] = []


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    status: str
    template_id: int | None = None
    started_at: datetime
    finished_at: datetime | None = None
    duration_minutes: int | None = None
    notes: str | None = None


class SessionDetailOut(SessionOut):
    exercises: list[SessionExerciseOut] = []


class PersonalRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    exercise_id: int
    record_type: str
    value: float
    reps_at_weight: int | None = None
    achieved_at: datetime


class CompleteSetOut(BaseModel):
    set: SetOut
    personal_record: PersonalRecordOut | None = None


class SessionSummaryOut(BaseModel):
    exercises_count: int
    completed_sets: int
    total_volume: float
    duration_minutes: int
    xp_awarded: int


class FinishSessionOut(BaseModel):
    session: SessionOut
    summary: SessionSummaryOut


class HistoryOut(BaseModel):
    items: list[SessionOut]
    limit: int
    offset: int
