from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TemplateExerciseIn(BaseModel):
    """One exercise as written by a person or by the plan generator."""

    name: str = Field(min_length=1, max_length=120)
    sets: int = Field(default=3, ge=1)
    reps: str = "10"
    notes: str | None = None

    @field_validator("reps", mode="before")
    @classmethod
    def _reps_as_text(cls, v):
        # Generators sometimes emit bare numbers ("reps": 12)
        if isinstance(v, (int, float)):
            return str(int(v))
        return v


class BuildTemplateIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    exercises: list[TemplateExerciseIn]
    focus: str = ""
    workout_location: str = ""


class ResaveTemplateIn(BuildTemplateIn):
    # Destructive: existing entries are dropped, so the caller has to say so
    confirm: bool = False


class UpdateTemplateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)


class TemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class TemplateEntryOut(BaseModel):
    id: int
    exercise_id: int
    exercise_name: str
    muscle_group: str
    sort_order: int
    target_sets: int
    target_reps: int
    rest_seconds: int
    notes: str | None = None


class TemplateDetailOut(TemplateOut):
    exercises: list[TemplateEntryOut] = []


class BuildTemplateOut(BaseModel):
    template_id: int
    entries_created: int
    skipped: list[str] = []


class BulkBuildOut(BaseModel):
    created: int
    template_ids: list[int]
    failed_days: list[str] = []
