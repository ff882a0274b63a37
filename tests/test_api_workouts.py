from conftest import auth_headers


async def _template(client, headers, name="Leg Day"):
    r = await client.post(
        "/templates",
        headers=headers,
        json={
            "name": name,
            "focus": "Leg Day",
            "workout_location": "gym",
            "exercises": [
                {"name": "Squats", "sets": 2, "reps": "8-12"},
                {"name": "Romanian Deadlift", "sets": 1, "reps": 10},
            ],
        },
    )
    assert r.status_code == 201
    return r.json()


async def test_template_crud_and_resave(client, user):
    headers = auth_headers(user)
    built = await _template(client, headers)
    assert built["entries_created"] == 2
    template_id = built["template_id"]

    r = await client.get(f"/templates/{template_id}", headers=headers)
    assert r.status_code == 200
    detail = r.json()
    assert [(e["exercise_name"], e["muscle_group"], e["target_reps"]) for e in detail["exercises"]] == [
        ("Squats", "quadriceps", 8),
        ("Romanian Deadlift", "quadriceps", 10),
    ]

    resave = {"name": "Leg Day", "exercises": [{"name": "Leg Press", "sets": 3, "reps": "12"}]}
    r = await client.put(f"/templates/{template_id}", headers=headers, json=resave)
    assert r.status_code == 428

    r = await client.put(f"/templates/{template_id}", headers=headers, json={**resave, "confirm": True})
    assert r.status_code == 200
    r = await client.get(f"/templates/{template_id}", headers=headers)
    assert [e["exercise_name"] for e in r.json()["exercises"]] == ["Leg Press"]

    r = await client.patch(f"/templates/{template_id}", headers=headers, json={"name": "Quads"})
    assert r.status_code == 200
    assert r.json()["name"] == "Quads"

    r = await client.delete(f"/templates/{template_id}", headers=headers)
    assert r.status_code == 200
    r = await client.get("/templates", headers=headers)
    assert r.json() == []


async def test_empty_template_is_rejected(client, user):
    r = await client.post("/templates", headers=auth_headers(user), json={"name": "Rest", "exercises": []})
    assert r.status_code == 400
    assert r.json()["detail"] == "This workout day has no exercises to create a template from"


async def test_templates_are_private(client, user, make_user):
    other = await make_user(email="other@example.com")
    built = await _template(client, auth_headers(user))

    r = await client.get(f"/templates/{built['template_id']}", headers=auth_headers(other))
    assert r.status_code == 404


async def test_full_workout_from_template(client, user):
    headers = auth_headers(user)
    built = await _template(client, headers)

    r = await client.post(f"/templates/{built['template_id']}/start", headers=headers)
    assert r.status_code == 201
    session_id = r.json()["id"]

    r = await client.post(f"/templates/{built['template_id']}/start", headers=headers)
    assert r.status_code == 409

    r = await client.get("/workouts/session/active", headers=headers)
    active = r.json()
    assert active["active"] is True
    squats = active["session"]["exercises"][0]
    assert squats["name"] == "Squats"
    assert len(squats["sets"]) == 2

    first_set = squats["sets"][0]["id"]
    r = await client.post(f"/workouts/sets/{first_set}/complete", headers=headers, json={"weight": 135, "reps": 8})
    assert r.status_code == 200
    body = r.json()
    assert body["set"]["is_completed"] is True
    assert body["personal_record"]["value"] == 135

    r = await client.post(f"/workouts/sets/{first_set}/complete", headers=headers, json={})
    assert r.status_code == 409

    second_set = squats["sets"][1]["id"]
    r = await client.post(f"/workouts/sets/{second_set}/complete", headers=headers, json={"weight": 135, "reps": 6})
    assert r.json()["personal_record"] is None

    r = await client.get("/notifications", headers=headers)
    notes = r.json()
    assert [(n["title"], n["body"]) for n in notes] == [("New PR!", "135 lbs on Squats for 8 reps!")]

    r = await client.post(f"/workouts/session/{session_id}/finish", headers=headers, json={"notes": "solid"})
    assert r.status_code == 200
    finished = r.json()
    assert finished["session"]["status"] == "finished"
    assert finished["summary"]["completed_sets"] == 2
    assert finished["summary"]["total_volume"] == 135 * 8 + 135 * 6

    r = await client.post(f"/workouts/session/{session_id}/cancel", headers=headers)
    assert r.status_code == 409

    r = await client.get("/workouts/history", headers=headers)
    assert [s["id"] for s in r.json()["items"]] == [session_id]

    r = await client.get("/workouts/prs", headers=headers)
    assert [p["value"] for p in r.json()] == [135]

    r = await client.get("/workouts/session/active", headers=headers)
    assert r.json() == {"active": False, "session": None}


async def test_ad_hoc_session_and_cancel(client, user, make_exercise):
    headers = auth_headers(user)
    bench = await make_exercise("Bench Press")

    r = await client.post("/workouts/session/start", headers=headers, json={"name": "Push"})
    assert r.status_code == 201
    session_id = r.json()["id"]

    r = await client.post(f"/workouts/session/{session_id}/exercises", headers=headers, json={"exercise_id": bench.id})
    assert r.status_code == 201
    assert r.json()["name"] == "Bench Press"

    r = await client.post(
        f"/workouts/session/{session_id}/exercises/{bench.id}/sets",
        headers=headers,
        json={"weight": 95, "reps": 10},
    )
    assert r.status_code == 201
    set_id = r.json()["id"]

    r = await client.patch(f"/workouts/sets/{set_id}", headers=headers, json={"reps": 12})
    assert r.json()["reps"] == 12

    await client.post(f"/workouts/sets/{set_id}/complete", headers=headers, json={})
    r = await client.delete(f"/workouts/sets/{set_id}", headers=headers)
    assert r.status_code == 409

    r = await client.post(f"/workouts/session/{session_id}/cancel", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"

    r = await client.get(f"/workouts/session/{session_id}", headers=headers)
    assert r.json()["exercises"] == []
    r = await client.get("/workouts/prs", headers=headers)
    assert r.json() == []


async def test_exercise_catalog_endpoints(client, user):
    headers = auth_headers(user)

    r = await client.post(
        "/exercises/resolve",
        headers=headers,
        json={"name": "Hip Thrust", "focus": "Glutes and Legs", "workout_location": "minimal"},
    )
    assert r.json()["created"] is True

    r = await client.get("/exercises", headers=headers, params={"search": "hip"})
    [ex] = r.json()
    assert (ex["name"], ex["muscle_group"], ex["equipment"]) == ("Hip Thrust", "quadriceps", "dumbbells")
