"""
Tests for deposit endpoints.
"""


def create(client, headers, content="A sunny walk", **extra):
    response = client.post("/api/deposits", json={"content": content, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def set_status(client, headers, deposit_id, status):
    return client.patch(f"/api/deposits/{deposit_id}/status", json={"status": status}, headers=headers)


def test_create_deposit_is_always_active(client, auth_headers):
    """Client-sent status is ignored on creation."""
    deposit = create(
        client, auth_headers,
        content="Coffee with an old friend",
        emotion="joy",
        tags=["friends", "joy"],
        status=30
    )
    assert deposit["status"] == 0
    assert deposit["state"] == "active"
    assert deposit["emotion"] == "joy"
    assert deposit["tags"] == ["friends", "joy"]
    assert deposit["lastSurfacedAt"] is None
    assert deposit["createdAt"]


def test_create_deposit_with_media(client, auth_headers):
    deposit = create(
        client, auth_headers,
        mediaUri="file:///photos/beach.jpg",
        mediaType="photo"
    )
    assert deposit["mediaUri"] == "file:///photos/beach.jpg"
    assert deposit["mediaType"] == "photo"


def test_create_deposit_validation(client, auth_headers):
    response = client.post("/api/deposits", json={"content": "   "}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert response.json()["details"]

    response = client.post("/api/deposits", json={"emotion": "joy"}, headers=auth_headers)
    assert response.status_code == 400

    response = client.post(
        "/api/deposits",
        json={"content": "x", "mediaUri": "file:///a.mp4"},
        headers=auth_headers
    )
    assert response.status_code == 400

    response = client.post(
        "/api/deposits",
        json={"content": "x", "mediaUri": "file:///a.gif", "mediaType": "gif"},
        headers=auth_headers
    )
    assert response.status_code == 400


def test_list_is_newest_first(client, auth_headers):
    first = create(client, auth_headers, content="first")
    second = create(client, auth_headers, content="second")
    listed = client.get("/api/deposits", headers=auth_headers).json()
    assert [d["id"] for d in listed] == [second["id"], first["id"]]


def test_create_list_soft_delete_round_trip(client, auth_headers):
    deposit = create(client, auth_headers, content="x")

    listed = client.get("/api/deposits", params={"includeInactive": "false"}, headers=auth_headers).json()
    assert [(d["id"], d["status"]) for d in listed] == [(deposit["id"], 0)]

    response = client.delete(f"/api/deposits/{deposit['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    listed = client.get("/api/deposits", headers=auth_headers).json()
    assert listed == []

    listed = client.get("/api/deposits", params={"includeInactive": "true"}, headers=auth_headers).json()
    assert [(d["id"], d["status"], d["state"]) for d in listed] == [(deposit["id"], -1, "inactive")]


def test_listing_and_surfacing_with_mixed_statuses(client, auth_headers):
    """Active, cooldown and inactive deposits: only the active one surfaces."""
    d1 = create(client, auth_headers, content="D1")
    d2 = create(client, auth_headers, content="D2")
    d3 = create(client, auth_headers, content="D3")
    assert set_status(client, auth_headers, d2["id"], 5).status_code == 200
    assert set_status(client, auth_headers, d3["id"], -1).status_code == 200

    for _ in range(10):
        surfaced = client.get("/api/deposits/surface", headers=auth_headers).json()
        assert surfaced["id"] == d1["id"]

    active_or_cooling = client.get("/api/deposits", headers=auth_headers).json()
    assert {d["id"] for d in active_or_cooling} == {d1["id"], d2["id"]}

    everything = client.get("/api/deposits", params={"includeInactive": True}, headers=auth_headers).json()
    assert {d["id"] for d in everything} == {d1["id"], d2["id"], d3["id"]}


def test_surface_respects_exclusions(client, auth_headers):
    d1 = create(client, auth_headers, content="D1")
    d2 = create(client, auth_headers, content="D2")

    for _ in range(10):
        surfaced = client.get(
            "/api/deposits/surface", params={"exclude": d1["id"]}, headers=auth_headers
        ).json()
        assert surfaced["id"] == d2["id"]

    response = client.get(
        "/api/deposits/surface",
        params={"exclude": f"{d1['id']},{d2['id']}"},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json() is None


def test_surface_empty_reserve_returns_null(client, auth_headers):
    response = client.get("/api/deposits/surface", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() is None


def test_mark_surfaced_starts_cooldown(client, auth_headers):
    deposit = create(client, auth_headers)
    response = client.patch(f"/api/deposits/{deposit['id']}/surface", headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == 30
    assert body["state"] == "cooldown"
    assert body["lastSurfacedAt"] is not None

    assert client.get("/api/deposits/surface", headers=auth_headers).json() is None
    # Cooldown deposits are still listed
    listed = client.get("/api/deposits", headers=auth_headers).json()
    assert [d["id"] for d in listed] == [deposit["id"]]


def test_update_deposit_only_touches_mutable_fields(client, auth_headers):
    deposit = create(client, auth_headers, content="old", emotion="joy", tags=["a"])
    response = client.patch(
        f"/api/deposits/{deposit['id']}",
        json={"content": "new", "tags": ["b", "c"], "status": 12, "mediaUri": "file:///x"},
        headers=auth_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["content"] == "new"
    assert body["emotion"] == "joy"
    assert body["tags"] == ["b", "c"]
    assert body["status"] == 0
    assert body["mediaUri"] is None


def test_update_deposit_rejects_empty_content(client, auth_headers):
    deposit = create(client, auth_headers)
    response = client.patch(
        f"/api/deposits/{deposit['id']}", json={"content": ""}, headers=auth_headers
    )
    assert response.status_code == 400


def test_missing_deposit_is_not_found(client, auth_headers):
    missing = "00000000-0000-0000-0000-000000000000"
    for response in (
        client.get(f"/api/deposits/{missing}", headers=auth_headers),
        client.patch(f"/api/deposits/{missing}", json={"content": "x"}, headers=auth_headers),
        set_status(client, auth_headers, missing, 0),
        client.patch(f"/api/deposits/{missing}/surface", headers=auth_headers),
        client.delete(f"/api/deposits/{missing}", headers=auth_headers),
    ):
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"


def test_set_status_validation(client, auth_headers):
    deposit = create(client, auth_headers)
    for bad in ("abc", "5", 2.5, True, None, -2, 366):
        response = set_status(client, auth_headers, deposit["id"], bad)
        assert response.status_code == 400, bad

    response = set_status(client, auth_headers, deposit["id"], 7)
    assert response.status_code == 200
    assert response.json()["state"] == "cooldown"

    response = set_status(client, auth_headers, deposit["id"], 0)
    assert response.json()["state"] == "active"


def test_deposits_are_private_to_their_owner(client, register):
    _, owner = register("owner-device")
    _, stranger = register("stranger-device")
    deposit = create(client, owner)

    assert client.get("/api/deposits", headers=stranger).json() == []
    assert client.get("/api/deposits/surface", headers=stranger).json() is None
    assert client.get(f"/api/deposits/{deposit['id']}", headers=stranger).status_code == 404
    assert client.delete(f"/api/deposits/{deposit['id']}", headers=stranger).status_code == 404


def test_requires_authentication(client):
    assert client.get("/api/deposits").status_code == 401


def test_stats(client, auth_headers):
    d1 = create(client, auth_headers, content="D1")
    d2 = create(client, auth_headers, content="D2")
    d3 = create(client, auth_headers, content="D3")
    create(client, auth_headers, content="D4")
    client.patch(f"/api/deposits/{d2['id']}/surface", headers=auth_headers)
    client.delete(f"/api/deposits/{d3['id']}", headers=auth_headers)
    client.post(
        "/api/rainy-day-logs", json={"emotion": "sad", "depositId": d1["id"]}, headers=auth_headers
    )

    stats = client.get("/api/stats", headers=auth_headers).json()
    assert stats == {
        "totalDeposits": 3,
        "activeDeposits": 2,
        "cooldownDeposits": 1,
        "totalRainyDays": 1,
        "connections": 0,
    }
