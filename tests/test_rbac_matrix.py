from collabill.models.enums import Role
from collabill.rbac.perms import PERMS

def test_owner_only_actions(client, owner, collaborator):
    # collaborator is blocked from team management
    assert client.get("/users", headers=collaborator.headers).status_code == 403
    r = client.post("/invitations", json={"email": "new@example.com"}, headers=collaborator.headers)
    assert r.status_code == 403
    r = client.put(
        f"/users/{collaborator.id}/rates",
        json={"daily_rate": "1", "rate_xs": "1", "rate_s": "1", "rate_m": "1", "rate_l": "1"},
        headers=collaborator.headers,
    )
    assert r.status_code == 403

    r = client.get("/users", headers=owner.headers)
    assert r.status_code == 200
    emails = {u["email"] for u in r.json()}
    assert owner.user.email in emails
    assert collaborator.user.email in emails

def test_me_reports_roles(client, owner, collaborator):
    r = client.get("/users/me", headers=owner.headers)
    assert r.status_code == 200
    assert r.json()["roles"] == ["OWNER"]

    r = client.get("/users/me", headers=collaborator.headers)
    assert r.json()["roles"] == ["COLLABORATOR"]

def test_missing_or_bad_token(client):
    assert client.get("/users/me").status_code == 401
    assert client.get("/users/me", headers={"authorization": "bearer nope"}).status_code == 401

def test_owner_sets_rates(client, owner, collaborator):
    body = {"daily_rate": "450.00", "rate_xs": "40", "rate_s": "100", "rate_m": "250", "rate_l": "600"}
    r = client.put(f"/users/{collaborator.id}/rates", json=body, headers=owner.headers)
    assert r.status_code == 200, r.text
    assert r.json()["daily_rate"] == "450.00"

    # second call updates in place
    body["rate_l"] = "700"
    r = client.put(f"/users/{collaborator.id}/rates", json=body, headers=owner.headers)
    assert r.status_code == 200
    assert r.json()["rate_l"] == "700.00"

def test_every_perm_is_owner_only():
    assert PERMS
    for action, roles in PERMS.items():
        assert roles == {Role.OWNER}, action
