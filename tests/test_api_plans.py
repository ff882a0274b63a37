import httpx

from conftest import auth_headers
from fortivus.main import app
from fortivus.services.remote_functions import FunctionsClient, get_functions_client
from test_plans import PLAN, REQUEST


def _use_functions(handler):
    client = FunctionsClient("http://functions.test", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_functions_client] = lambda: client


async def test_generate_without_remote_functions_configured(client, user):
    r = await client.post("/plans/generate", headers=auth_headers(user), json=REQUEST)
    assert r.status_code == 503


async def test_generate_plan(client, user):
    _use_functions(lambda request: httpx.Response(200, json={"plan": PLAN}))

    r = await client.post("/plans/generate", headers=auth_headers(user), json=REQUEST)

    assert r.status_code == 200
    plan = r.json()
    assert plan["workout"]["weeklySchedule"][0]["focus"] == "Leg Day"
    assert plan["diet"]["dailyCalories"] == 2600


async def test_generate_plan_rate_limited(client, user):
    _use_functions(lambda request: httpx.Response(429, json={"error": "Too many requests"}))

    r = await client.post("/plans/generate", headers=auth_headers(user), json=REQUEST)

    assert r.status_code == 429
    assert r.json()["detail"] == "Rate limit exceeded. Please try again later."


async def test_generate_plan_bad_output(client, user):
    _use_functions(lambda request: httpx.Response(200, json={"plan": {"diet": "lots of rice"}}))

    r = await client.post("/plans/generate", headers=auth_headers(user), json=REQUEST)

    assert r.status_code == 502
    assert r.json()["detail"] == "Failed to parse AI response"


async def test_saved_plan_to_templates(client, user):
    headers = auth_headers(user)

    r = await client.post("/plans", headers=headers, json={**REQUEST, "plan": PLAN})
    assert r.status_code == 201
    plan_id = r.json()["id"]

    r = await client.post(f"/plans/{plan_id}/templates", headers=headers, json={"day_index": 0})
    assert r.status_code == 201
    assert r.json()["entries_created"] == 2

    r = await client.post(f"/plans/{plan_id}/templates", headers=headers, json={"day_index": 1})
    assert r.status_code == 400

    r = await client.post(f"/plans/{plan_id}/templates/week", headers=headers)
    assert r.status_code == 201
    assert r.json()["created"] == 2

    r = await client.get("/templates", headers=headers)
    assert sorted(t["name"] for t in r.json()) == ["Monday - Leg Day", "Monday - Leg Day", "Thursday - Chest"]

    r = await client.delete(f"/plans/{plan_id}", headers=headers)
    assert r.status_code == 200
    r = await client.get("/plans", headers=headers)
    assert r.json() == []
