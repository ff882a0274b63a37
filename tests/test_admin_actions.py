import json

import httpx
import pytest
from sqlalchemy import select

from fortivus.core.errors import Forbidden, NotFound, RemoteFunctionError, ValidationFailed
from fortivus.models.user import User
from fortivus.models.workout_template import WorkoutTemplate
from fortivus.services.admin_actions import apply_bulk_action
from fortivus.services.remote_functions import FunctionsClient
from fortivus.services.user_management import HttpUserManager, LocalUserManager, list_users, manage_user


class RecordingManager:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def apply(self, target_user_id, action):
        self.calls.append((target_user_id, action))
        if target_user_id in self.failing:
            raise NotFound("User not found")


async def test_bulk_isolates_failures():
    manager = RecordingManager(failing={3})

    result = await apply_bulk_action("ban", [1, 2, 3, 4], acting_user_id=99, manager=manager)

    assert result.succeeded == 3
    assert result.failed == [3]
    assert sorted(t for t, _ in manager.calls) == [1, 2, 3, 4]


async def test_bulk_never_targets_the_actor_and_dedupes():
    manager = RecordingManager()

    result = await apply_bulk_action("delete", [5, 7, 5, 7], acting_user_id=7, manager=manager)

    assert manager.calls == [(5, "delete")]
    assert result.succeeded == 1
    assert result.failed == []


async def test_bulk_with_only_the_actor_does_nothing():
    manager = RecordingManager()

    result = await apply_bulk_action("ban", [7], acting_user_id=7, manager=manager)

    assert manager.calls == []
    assert result.succeeded == 0


async def test_bulk_counts_unexpected_errors_as_failures():
    class ExplodingManager:
        async def apply(self, target_user_id, action):
            if target_user_id == 2:
                raise RuntimeError("connection reset")

    result = await apply_bulk_action("unban", [1, 2], acting_user_id=9, manager=ExplodingManager())

    assert result.succeeded == 1
    assert result.failed == [2]


async def test_local_manager_ban_unban_and_delete(db, session_factory, make_user):
    keep = await make_user(email="keep@example.com")
    gone = await make_user(email="gone@example.com")
    db.add(WorkoutTemplate(user_id=gone.id, name="Push"))
    await db.commit()

    manager = LocalUserManager(session_factory)
    result = await apply_bulk_action("ban", [keep.id, gone.id], acting_user_id=0, manager=manager)
    assert result.succeeded == 2

    await manager.apply(keep.id, "unban")
    await manager.apply(gone.id, "delete")

    db.expire_all()
    users = (await db.execute(select(User))).scalars().all()
    assert [(u.email, u.banned_at) for u in users] == [("keep@example.com", None)]
    assert (await db.execute(select(WorkoutTemplate))).scalars().all() == []


async def test_manage_user_guards(db, user):
    with pytest.raises(ValidationFailed):
        await manage_user(db, user.id, "promote")
    with pytest.raises(Forbidden):
        await manage_user(db, user.id, "ban", acting_user_id=user.id)
    with pytest.raises(NotFound):
        await manage_user(db, 12345, "ban")


async def test_http_manager_invokes_remote_function():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, json.loads(request.content), request.headers.get("authorization")))
        return httpx.Response(200, json={"success": True})

    client = FunctionsClient("http://functions.test", api_key="k3y", transport=httpx.MockTransport(handler))

    await HttpUserManager(client).apply(42, "ban")

    assert seen == [("/manage-user", {"targetUserId": 42, "action": "ban"}, "Bearer k3y")]


async def test_http_manager_surfaces_remote_errors():
    client = FunctionsClient(
        "http://functions.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(404, json={"error": "User not found"})),
    )

    with pytest.raises(RemoteFunctionError) as exc:
        await HttpUserManager(client).apply(42, "delete")

    assert exc.value.detail == "User not found"


async def test_list_users_filters_and_counts(db, make_user):
    await make_user(email="ann@example.com", display_name="Ann")
    banned = await make_user(email="bob@example.com", display_name="Bob")
    await make_user(email="root@example.com", is_admin=True)
    await manage_user(db, banned.id, "ban")

    users, total = await list_users(db, banned=True)
    assert total == 1
    assert [u.email for u in users] == ["bob@example.com"]

    users, total = await list_users(db, search="ANN")
    assert [u.email for u in users] == ["ann@example.com"]

    users, total = await list_users(db, is_admin=False, limit=1)
    assert total == 2
    assert len(users) == 1
