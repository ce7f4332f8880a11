from fastapi.testclient import TestClient


def test_request_and_approve_flow(client: TestClient, alice, bob, login_as):
    login_as(alice)
    r = client.post("/api/friends/request", json={"toUserId": bob.id})
    assert r.status_code == 200
    request_id = r.json()["requestId"]

    outgoing = client.get("/api/friends/requests/outgoing").json()
    assert [(fr["id"], fr["username"]) for fr in outgoing] == [(request_id, "bob")]

    # sending again, in either direction, conflicts
    r = client.post("/api/friends/request", json={"toUserId": bob.id})
    assert r.status_code == 400
    assert r.json()["detail"] == "Friend request already sent"

    login_as(bob)
    r = client.post("/api/friends/request", json={"toUserId": alice.id})
    assert r.status_code == 400
    incoming = client.get("/api/friends/requests/incoming").json()
    assert [fr["username"] for fr in incoming] == ["alice"]

    # the sender cannot answer their own request
    login_as(alice)
    r = client.post(
        f"/api/friends/request/{request_id}/respond", json={"status": "approved"}
    )
    assert r.status_code == 403

    login_as(bob)
    r = client.post(
        f"/api/friends/request/{request_id}/respond", json={"status": "approved"}
    )
    assert r.status_code == 200
    assert r.json()["status"] == "approved"
    assert client.get("/api/friends/requests/incoming").json() == []

    for me, other in ((alice, bob), (bob, alice)):
        login_as(me)
        friends = client.get("/api/friends").json()
        assert friends == [{"id": other.id, "username": other.username}]


def test_respond_with_invalid_status(client, alice, bob, login_as):
    login_as(alice)
    request_id = client.post(
        "/api/friends/request", json={"toUserId": bob.id}
    ).json()["requestId"]
    login_as(bob)
    r = client.post(
        f"/api/friends/request/{request_id}/respond", json={"status": "whatever"}
    )
    assert r.status_code == 400


def test_request_validation(client, alice, login_as):
    login_as(alice)
    assert client.post("/api/friends/request", json={}).status_code == 400
    r = client.post("/api/friends/request", json={"toUserId": alice.id})
    assert r.status_code == 400
    assert client.post("/api/friends/request", json={"toUserId": 999}).status_code == 404


def test_cancel_and_remove(client, alice, bob, login_as):
    login_as(alice)
    client.post("/api/friends/request", json={"toUserId": bob.id})
    r = client.delete(f"/api/friends/request/outgoing/{bob.id}")
    assert r.json()["cancelled"] is True
    assert client.get("/api/friends/requests/outgoing").json() == []

    request_id = client.post(
        "/api/friends/request", json={"toUserId": bob.id}
    ).json()["requestId"]
    login_as(bob)
    client.post(f"/api/friends/request/{request_id}/respond", json={"status": "approved"})
    r = client.delete(f"/api/friends/{alice.id}")
    assert r.json()["removed"] is True

    login_as(alice)
    assert client.get("/api/friends").json() == []


def test_directory_and_search(client, alice, bob, carol, login_as):
    login_as(alice)
    client.post("/api/friends/request", json={"toUserId": carol.id})

    directory = {e["username"]: e for e in client.get("/api/friends/directory").json()}
    assert set(directory) == {"bob", "carol"}
    assert directory["carol"]["hasPendingRequest"] is True
    assert directory["bob"]["isFriend"] is False

    found = client.get("/api/friends/search/CAR").json()
    assert [e["username"] for e in found] == ["carol"]
    assert client.get("/api/friends/search/c").status_code == 400


def test_friends_require_auth(client):
    assert client.get("/api/friends").status_code == 401
