import pytest
from sqlalchemy import func, select

from fortivus.core.errors import ValidationFailed
from fortivus.models.exercise import Exercise
from fortivus.services import exercise_catalog
from fortivus.services.exercise_catalog import (
    create_exercise,
    infer_equipment,
    infer_muscle_group,
    list_exercises,
    resolve_exercise,
)


@pytest.mark.parametrize(
    "focus, expected",
    [
        ("Leg Day", "quadriceps"),
        ("Legs and Back", "quadriceps"),
        ("Back & Biceps", "back"),
        ("Chest and Shoulders", "chest"),
        ("Shoulders", "shoulders"),
        ("Arms", "biceps"),
        ("Upper Body Power", "core"),
        ("", "core"),
    ],
)
def test_infer_muscle_group_uses_keyword_priority(focus, expected):
    assert infer_muscle_group(focus) == expected


@pytest.mark.parametrize(
    "location, expected",
    [
        ("bodyweight", "bodyweight"),
        ("minimal", "dumbbells"),
        ("Minimal", "dumbbells"),
        ("gym", "barbell"),
        ("", "barbell"),
    ],
)
def test_infer_equipment(location, expected):
    assert infer_equipment(location) == expected


async def _count(db) -> int:
    return (await db.execute(select(func.count(Exercise.id)))).scalar()


async def test_unseen_name_creates_exactly_one_custom_entry(db, user):
    exercise_id, created = await resolve_exercise(db, "Bulgarian Split Squat", "Leg Day", user.id, "gym")
    await db.commit()
    assert created is True

    again_id, created_again = await resolve_exercise(db, "Bulgarian Split Squat", "Back Day", user.id, "gym")
    assert again_id == exercise_id
    assert created_again is False
    assert await _count(db) == 1

    ex = await db.get(Exercise, exercise_id)
    assert ex.muscle_group == "quadriceps"
    assert ex.equipment == "barbell"
    assert ex.is_custom is True
    assert ex.created_by == user.id


async def test_resolve_matches_case_insensitive_substring(db, user, make_exercise):
    squat = await make_exercise("Barbell Back Squat", muscle_group="quadriceps")

    exercise_id, created = await resolve_exercise(db, "back squat", "Leg Day", user.id, "gym")

    assert exercise_id == squat.id
    assert created is False
    assert await _count(db) == 1


async def test_resolve_prefers_lowest_id_among_matches(db, user, make_exercise):
    first = await make_exercise("Dumbbell Press")
    await make_exercise("Incline Dumbbell Press")

    exercise_id, _ = await resolve_exercise(db, "dumbbell press", "Chest", user.id, "gym")

    assert exercise_id == first.id


async def test_resolve_treats_like_wildcards_literally(db, user, make_exercise):
    await make_exercise("Push Up", muscle_group="chest", equipment="bodyweight")

    _, created = await resolve_exercise(db, "P%h", "Chest", user.id, "bodyweight")

    assert created is True
    assert await _count(db) == 2


async def test_resolve_rejects_blank_name(db, user):
    with pytest.raises(ValidationFailed):
        await resolve_exercise(db, "   ", "Leg Day", user.id, "gym")


async def test_create_exercise_collapses_normalized_duplicates(db, user):
    ex, created = await create_exercise(
        db, name="Cable  Fly", muscle_group="chest", equipment="cable", owner_id=user.id
    )
    await db.commit()
    assert created is True
    assert ex.name == "Cable Fly"

    dup, created_dup = await create_exercise(
        db, name="cable fly", muscle_group="chest", equipment="cable", owner_id=user.id
    )
    assert dup.id == ex.id
    assert created_dup is False
    assert await _count(db) == 1


async def test_list_exercises_filters(db, make_exercise):
    await make_exercise("Bench Press", muscle_group="chest")
    await make_exercise("Deadlift", muscle_group="back")
    await make_exercise("Pull Up", muscle_group="back", equipment="bodyweight")

    back = await list_exercises(db, muscle_group="back")
    assert [e.name for e in back] == ["Deadlift", "Pull Up"]

    found = await list_exercises(db, search="press")
    assert [e.name for e in found] == ["Bench Press"]


async def test_create_exercise_reuses_row_inserted_concurrently(db, session_factory, user, monkeypatch):
    async with session_factory() as other:
        winner = Exercise(
            name="Face Pull",
            name_normalized="face pull",
            muscle_group="shoulders",
            equipment="cable",
            is_custom=True,
        )
        other.add(winner)
        await other.commit()

    real_find = exercise_catalog._find_by_normalized
    lookups = []

    async def stale_then_real(db, normalized):
        lookups.append(normalized)
        if len(lookups) == 1:
            # The other request had not committed yet when we looked
            return None
        return await real_find(db, normalized)

    monkeypatch.setattr(exercise_catalog, "_find_by_normalized", stale_then_real)

    ex, created = await create_exercise(
        db, name="Face  Pull", muscle_group="shoulders", equipment="cable", owner_id=user.id
    )

    assert created is False
    assert ex.id == winner.id
    assert lookups == ["face pull", "face pull"]

    other_ex, other_created = await create_exercise(
        db, name="Band Pull Apart", muscle_group="shoulders", equipment="bands", owner_id=user.id
    )
    await db.commit()
    assert other_created is True
    assert await _count(db) == 2
    assert (await db.get(Exercise, other_ex.id)).name == "Band Pull Apart"
