import uuid


def unique_email(prefix):
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


def create_partner(client):
    r = client.post(
        "/users/",
        json={"email": unique_email("coach"), "first_name": "Pat", "last_name": "Partner", "role": "partner"},
    )
    assert r.status_code == 200, r.text
    return r.json()


def create_client(client, partner_id=None):
    r = client.post(
        "/users/",
        json={
            "email": unique_email("client"),
            "first_name": "Cal",
            "last_name": "Client",
            "role": "client",
            "connected_partner_id": partner_id,
        },
    )
    assert r.status_code == 200, r.text
    return r.json()


def test_signup_roles(client):
    partner = create_partner(client)
    assert partner["is_partner"] is True
    assert partner["id"]

    member = create_client(client, partner["id"])
    assert member["is_partner"] is False
    assert member["connected_partner_id"] == partner["id"]

    r = client.get(f"/users/{member['id']}")
    assert r.status_code == 200
    assert r.json()["email"] == member["email"]


def test_signup_with_auth_provider_id(client):
    uid = str(uuid.uuid4())
    r = client.post(
        "/users/",
        json={"id": uid, "email": unique_email("c"), "first_name": "A", "last_name": "B"},
    )
    assert r.status_code == 200
    assert r.json()["id"] == uid


def test_duplicate_email_rejected(client):
    email = unique_email("dup")
    body = {"email": email, "first_name": "A", "last_name": "B"}
    assert client.post("/users/", json=body).status_code == 200
    assert client.post("/users/", json=body).status_code == 409


def test_connected_partner_must_be_partner(client):
    plain = create_client(client)
    r = client.post(
        "/users/",
        json={
            "email": unique_email("c"),
            "first_name": "A",
            "last_name": "B",
            "connected_partner_id": plain["id"],
        },
    )
    assert r.status_code == 422


def test_partner_directory(client):
    partner = create_partner(client)
    r = client.get("/users/partners")
    assert r.status_code == 200
    ids = [p["id"] for p in r.json()]
    assert partner["id"] in ids


def test_partner_lists_connected_clients(client):
    partner = create_partner(client)
    mine = create_client(client, partner["id"])
    create_client(client)

    r = client.get(f"/partners/{partner['id']}/clients")
    assert r.status_code == 200
    assert [c["id"] for c in r.json()] == [mine["id"]]


def test_client_detail_includes_profile(client):
    partner = create_partner(client)
    member = create_client(client, partner["id"])
    client.post(
        "/vital/webhook",
        json={"event_type": "daily.data.steps.created", "user_id": member["id"], "data": {"data": [{"value": 321}]}},
    )

    r = client.get(f"/partners/{partner['id']}/clients/{member['id']}")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["client"]["id"] == member["id"]
    assert body["profile"]["steps"] == 321


def test_client_detail_requires_connection(client):
    partner = create_partner(client)
    other = create_partner(client)
    member = create_client(client, other["id"])

    r = client.get(f"/partners/{partner['id']}/clients/{member['id']}")
    assert r.status_code == 403
    assert r.json()["detail"] == "You are not authorized to view this client"


def test_partner_metrics_for_clients(client):
    partner = create_partner(client)
    member = create_client(client, partner["id"])
    client.post(
        "/vital/webhook",
        json={"event_type": "daily.data.sleep.created", "user_id": member["id"], "data": {"total": 25200}},
    )

    r = client.get(f"/partners/{partner['id']}/metrics")
    assert r.status_code == 200, r.text
    assert r.json()[member["id"]]["sleep_hours"] == 7.0


def test_unknown_partner(client):
    assert client.get(f"/partners/{uuid.uuid4()}/clients").status_code == 404


def test_client_detail_hides_access_token(client, db):
    from app.services.profile_store import ProfileStore

    partner = create_partner(client)
    member = create_client(client, partner["id"])
    ProfileStore(db).upsert(member["id"], {"status": "connected", "access_token": "SECRET-TOKEN"})

    r = client.get(f"/partners/{partner['id']}/clients/{member['id']}")
    assert r.status_code == 200, r.text
    profile = r.json()["profile"]
    assert profile["status"] == "connected"
    assert "access_token" not in profile
    assert "SECRET-TOKEN" not in r.text
