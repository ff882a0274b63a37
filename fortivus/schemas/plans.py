from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fortivus.schemas.templates import TemplateExerciseIn


class _PlanModel(BaseModel):
    # The generator speaks camelCase; accept snake_case too
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Macros(_PlanModel):
    protein: float = 0
    carbs: float = 0
    fats: float = 0


class MealPlanItem(_PlanModel):
    meal: str
    foods: list[str] = []
    calories: float = 0


class DietPlan(_PlanModel):
    daily_calories: float = 0
    macros: Macros = Macros()
    meal_plan: list[MealPlanItem] = []
    tips: list[str] = []


class DayPlan(_PlanModel):
    day: str
    focus: str = ""
    exercises: list[TemplateExerciseIn] = []


class WorkoutPlan(_PlanModel):
    days_per_week: int = 0
    focus_areas: list[str] = []
    weekly_schedule: list[DayPlan] = []
    cardio_recommendation: str = ""


class SupplementItem(_PlanModel):
    name: str
    dosage: str = ""
    timing: str = ""
    benefit: str = ""


class PersonalPlanData(_PlanModel):
    """Shape of a generated plan. Anything else from the generator is rejected."""

    diet: DietPlan
    workout: WorkoutPlan
    supplements: list[SupplementItem] = []
    timeline: str = ""
    key_priorities: list[str] = []


class CurrentStats(_PlanModel):
    age: str | None = None
    weight: str | None = None
    height: str | None = None
    activity_level: str | None = None
    experience_level: str | None = None


class PlanPreferences(_PlanModel):
    diet: str | None = None
    workout_location: str | None = None
    time_available: str | None = None


class GeneratePlanIn(_PlanModel):
    goals: str
    current_stats: CurrentStats = CurrentStats()
    preferences: PlanPreferences = PlanPreferences()


class SavePlanIn(GeneratePlanIn):
    plan: PersonalPlanData


class SavedPlanOut(BaseModel):
    id: int
    goals: str
    current_stats: dict | None = None
    preferences: dict | None = None
    plan: PersonalPlanData
    created_at: datetime


class PlanDayTemplateIn(BaseModel):
    day_index: int = Field(ge=0)
    name: str | None = Field(default=None, max_length=100)
