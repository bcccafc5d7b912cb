from woodzire.core.security import hash_password
from woodzire.models.user import User


def test_list_users(admin, db):
    db.add(User(email="mod@woodzire.in", name="Mod", hashed_password=hash_password("mod-pass-123"),
                role="moderator"))
    db.commit()
    users = admin.get("/admin/users").json()
    assert {u["email"] for u in users} == {"admin@woodzire.in", "mod@woodzire.in"}
    assert [u["email"] for u in admin.get("/admin/users?role=moderator").json()] == ["mod@woodzire.in"]
    assert "hashed_password" not in users[0]


def test_promote_user_to_moderator(admin, client):
    client.post("/register", data={"name": "Neha", "email": "neha@example.com", "password": "longpassword"})
    neha = next(u for u in admin.get("/admin/users").json() if u["email"] == "neha@example.com")
    assert neha["role"] == "user"

    r = admin.put(f"/admin/users/{neha['id']}/role", json={"role": "moderator"})
    assert r.json()["role"] == "moderator"

    client.post("/login", data={"email": "neha@example.com", "password": "longpassword"})
    assert client.get("/admin/reviews").status_code == 200
    assert client.get("/admin/users").status_code == 403


def test_unknown_role_rejected(admin):
    me = admin.get("/admin/users").json()[0]
    assert admin.put(f"/admin/users/{me['id']}/role", json={"role": "owner"}).status_code == 422
    assert admin.put("/admin/users/999/role", json={"role": "user"}).status_code == 404


def test_admin_cannot_demote_self(admin):
    me = next(u for u in admin.get("/admin/users").json() if u["email"] == "admin@woodzire.in")
    r = admin.put(f"/admin/users/{me['id']}/role", json={"role": "user"})
    assert r.status_code == 400
    assert admin.get("/me").json()["role"] == "admin"
