from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MuscleGroup = Literal[
    "chest", "back", "shoulders", "biceps", "triceps", "quadriceps",
    "hamstrings", "glutes", "calves", "core", "full_body",
]
Equipment = Literal["bodyweight", "dumbbells", "barbell", "kettlebell", "machine", "cable", "bands"]


class ExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    muscle_group: str
    equipment: str
    is_custom: bool
    created_by: int | None = None
    created_at: datetime


class CreateExerciseIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    muscle_group: MuscleGroup
    equipment: Equipment


class ResolveExerciseIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    focus: str = ""
    workout_location: str = ""


class ResolveExerciseOut(BaseModel):
    exercise_id: int
    created: bool
