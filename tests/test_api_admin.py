from conftest import auth_headers


async def test_admin_routes_require_admin(client, user):
    r = await client.get("/admin/users", headers=auth_headers(user))
    assert r.status_code == 403
    assert r.json()["detail"] == "Admin access required"


async def test_list_users_page(client, make_user):
    admin = await make_user(email="admin@example.com", is_admin=True)
    await make_user(email="a@example.com")
    await make_user(email="b@example.com")

    r = await client.get("/admin/users", headers=auth_headers(admin), params={"limit": 2, "is_admin": False})
    page = r.json()
    assert page["total"] == 2
    assert page["limit"] == 2
    assert {u["email"] for u in page["items"]} == {"a@example.com", "b@example.com"}


async def test_bulk_ban_skips_the_acting_admin(client, make_user):
    admin = await make_user(email="admin@example.com", is_admin=True)
    a = await make_user(email="a@example.com")
    b = await make_user(email="b@example.com")

    r = await client.post(
        "/admin/users/bulk",
        headers=auth_headers(admin),
        json={"action": "ban", "target_user_ids": [a.id, b.id, admin.id, 9999]},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["succeeded"] == 2
    assert body["failed"] == [9999]
    banned = {u["email"] for u in body["users"]["items"] if u["banned_at"]}
    assert banned == {"a@example.com", "b@example.com"}

    r = await client.get("/me", headers=auth_headers(a))
    assert r.status_code == 403
    r = await client.get("/me", headers=auth_headers(admin))
    assert r.status_code == 200


async def test_manage_single_user(client, make_user):
    admin = await make_user(email="admin@example.com", is_admin=True)
    target = await make_user(email="target@example.com")
    headers = auth_headers(admin)

    r = await client.post("/admin/users/manage", headers=headers, json={"target_user_id": admin.id, "action": "ban"})
    assert r.status_code == 403

    r = await client.post("/admin/users/manage", headers=headers, json={"target_user_id": target.id, "action": "delete"})
    assert r.status_code == 200

    r = await client.get("/admin/users", headers=headers)
    assert [u["email"] for u in r.json()["items"]] == ["admin@example.com"]

    r = await client.post("/admin/users/manage", headers=headers, json={"target_user_id": target.id, "action": "ban"})
    assert r.status_code == 404
