"""
Tests for invites, connections, shared deposits and sender summaries.
"""
from datetime import timedelta

import pytest

from reserve.core.utils import utcnow
from reserve.models import CircleInvite, Connection


@pytest.fixture
def pair(register):
    """Two registered users: (alice, alice headers, bob, bob headers)."""
    alice, alice_headers = register("device-alice", displayName="Alice")
    bob, bob_headers = register("device-bob", displayName="Bob")
    return alice, alice_headers, bob, bob_headers


def invite(client, headers, invite_type="link", value=None):
    payload = {"inviteType": invite_type}
    if value is not None:
        payload["inviteValue"] = value
    response = client.post("/api/circle/invites", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def connected(client, pair):
    alice, alice_headers, bob, bob_headers = pair
    code = invite(client, alice_headers)["inviteCode"]
    response = client.post(f"/api/circle/invites/{code}/accept", headers=bob_headers)
    assert response.status_code == 200, response.text
    return pair


def share(client, headers, receiver_id, content="You've got this"):
    response = client.post(
        "/api/circle/shared-deposits",
        json={"receiverId": receiver_id, "content": content, "emotion": "hope"},
        headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestInvites:
    """Invite creation, lookup and acceptance."""

    def test_create_invite(self, client, pair):
        alice, alice_headers, _, _ = pair
        body = invite(client, alice_headers, "email", "bob@example.com")
        assert body["senderId"] == alice["id"]
        assert body["status"] == "pending"
        assert body["inviteType"] == "email"
        assert len(body["inviteCode"]) == 12
        int(body["inviteCode"], 16)
        assert body["expiresAt"] is not None

    def test_invite_codes_are_unique(self, client, pair):
        _, alice_headers, _, _ = pair
        codes = {invite(client, alice_headers)["inviteCode"] for _ in range(5)}
        assert len(codes) == 5

    def test_invalid_invite_type(self, client, pair):
        _, alice_headers, _, _ = pair
        response = client.post(
            "/api/circle/invites", json={"inviteType": "pigeon"}, headers=alice_headers
        )
        assert response.status_code == 400

    def test_lookup_shows_sender(self, client, pair):
        alice, alice_headers, _, bob_headers = pair
        code = invite(client, alice_headers)["inviteCode"]
        response = client.get(f"/api/circle/invites/{code}", headers=bob_headers)
        assert response.status_code == 200
        assert response.json()["sender"] == {"id": alice["id"], "displayName": "Alice"}

    def test_unknown_code(self, client, pair):
        _, _, _, bob_headers = pair
        response = client.get("/api/circle/invites/deadbeef0000", headers=bob_headers)
        assert response.status_code == 404
        response = client.post("/api/circle/invites/deadbeef0000/accept", headers=bob_headers)
        assert response.status_code == 404

    def test_accept_connects_both_directions(self, client, db_session, pair):
        alice, alice_headers, bob, bob_headers = pair
        code = invite(client, alice_headers)["inviteCode"]

        response = client.post(f"/api/circle/invites/{code}/accept", headers=bob_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["connection"]["userId"] == alice["id"]
        assert body["connection"]["connectedUserId"] == bob["id"]
        assert body["connection"]["status"] == "accepted"

        rows = db_session.query(Connection).all()
        assert {(r.user_id, r.connected_user_id) for r in rows} == {
            (alice["id"], bob["id"]), (bob["id"], alice["id"])
        }
        assert all(r.accepted_at is not None for r in rows)

        invite_row = db_session.query(CircleInvite).filter_by(invite_code=code).one()
        assert invite_row.status.value == "accepted"

    def test_self_invite(self, client, pair):
        _, alice_headers, _, _ = pair
        code = invite(client, alice_headers)["inviteCode"]
        response = client.post(f"/api/circle/invites/{code}/accept", headers=alice_headers)
        assert response.status_code == 403
        assert response.json()["code"] == "self_invite"

    def test_invite_cannot_be_reused(self, client, register, connected):
        alice, alice_headers, _, bob_headers = connected
        code = invite(client, alice_headers)["inviteCode"]
        _, carol_headers = register("device-carol")

        response = client.post(f"/api/circle/invites/{code}/accept", headers=carol_headers)
        assert response.status_code == 200
        response = client.post(f"/api/circle/invites/{code}/accept", headers=bob_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "invite_unavailable"

    def test_already_connected(self, client, connected):
        _, alice_headers, _, bob_headers = connected
        code = invite(client, alice_headers)["inviteCode"]
        response = client.post(f"/api/circle/invites/{code}/accept", headers=bob_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "already_connected"

    def test_reverse_invite_when_already_connected(self, client, connected):
        _, alice_headers, _, bob_headers = connected
        code = invite(client, bob_headers)["inviteCode"]
        response = client.post(f"/api/circle/invites/{code}/accept", headers=alice_headers)
        assert response.status_code == 409

    def test_expired_invite(self, client, db_session, pair):
        _, alice_headers, _, bob_headers = pair
        code = invite(client, alice_headers)["inviteCode"]

        invite_row = db_session.query(CircleInvite).filter_by(invite_code=code).one()
        invite_row.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        response = client.post(f"/api/circle/invites/{code}/accept", headers=bob_headers)
        assert response.status_code == 410
        assert response.json()["code"] == "invite_expired"

        response = client.post(f"/api/circle/invites/{code}/accept", headers=bob_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "invite_unavailable"

        db_session.expire_all()
        assert db_session.query(Connection).count() == 0


class TestConnections:
    """Listing and removing connections."""

    def test_list_connections(self, client, connected):
        alice, alice_headers, bob, bob_headers = connected
        mine = client.get("/api/circle/connections", headers=alice_headers).json()
        assert len(mine) == 1
        assert mine[0]["connectedUserId"] == bob["id"]
        assert mine[0]["connectedUser"]["displayName"] == "Bob"

        theirs = client.get("/api/circle/connections", headers=bob_headers).json()
        assert theirs[0]["connectedUserId"] == alice["id"]

    def test_remove_deletes_both_directions(self, client, connected):
        alice, alice_headers, bob, bob_headers = connected
        connection_id = client.get("/api/circle/connections", headers=bob_headers).json()[0]["id"]

        response = client.delete(f"/api/circle/connections/{connection_id}", headers=bob_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert client.get("/api/circle/connections", headers=alice_headers).json() == []
        assert client.get("/api/circle/connections", headers=bob_headers).json() == []

        response = client.post(
            "/api/circle/shared-deposits",
            json={"receiverId": bob["id"], "content": "Still here"},
            headers=alice_headers
        )
        assert response.status_code == 403

    def test_remove_requires_membership(self, client, register, connected):
        _, alice_headers, _, _ = connected
        connection_id = client.get("/api/circle/connections", headers=alice_headers).json()[0]["id"]
        _, carol_headers = register("device-carol")

        response = client.delete(f"/api/circle/connections/{connection_id}", headers=carol_headers)
        assert response.status_code == 404
        assert len(client.get("/api/circle/connections", headers=alice_headers).json()) == 1


class TestSharedDeposits:
    """Sharing, receiving and using shared deposits."""

    def test_share_requires_connection(self, client, pair):
        _, alice_headers, bob, _ = pair
        response = client.post(
            "/api/circle/shared-deposits",
            json={"receiverId": bob["id"], "content": "Hello"},
            headers=alice_headers
        )
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_share_rejects_empty_content(self, client, connected):
        _, alice_headers, bob, _ = connected
        response = client.post(
            "/api/circle/shared-deposits",
            json={"receiverId": bob["id"], "content": "  "},
            headers=alice_headers
        )
        assert response.status_code == 400

    def test_received_and_sent_views(self, client, connected):
        alice, alice_headers, bob, bob_headers = connected
        shared = share(client, alice_headers, bob["id"])
        assert shared["status"] == 0
        assert shared["senderId"] == alice["id"]

        received = client.get("/api/circle/shared-deposits/received", headers=bob_headers).json()
        assert [r["id"] for r in received] == [shared["id"]]

        client.post(f"/api/circle/shared-deposits/{shared['id']}/use", json={}, headers=bob_headers)

        sent = client.get("/api/circle/shared-deposits/sent", headers=alice_headers).json()
        assert len(sent) == 1
        assert sent[0]["receiverId"] == bob["id"]
        assert "status" not in sent[0]
        assert "lastSurfacedAt" not in sent[0]

        assert client.get("/api/circle/shared-deposits/received", headers=alice_headers).json() == []

    def test_surface_and_use(self, client, connected):
        _, alice_headers, bob, bob_headers = connected
        shared = share(client, alice_headers, bob["id"])

        surfaced = client.get("/api/circle/shared-deposits/surface", headers=bob_headers).json()
        assert surfaced["id"] == shared["id"]

        response = client.get(
            f"/api/circle/shared-deposits/surface?exclude={shared['id']}", headers=bob_headers
        )
        assert response.json() is None

        response = client.post(
            f"/api/circle/shared-deposits/{shared['id']}/use", json={"helpful": True}, headers=bob_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == 30
        assert body["state"] == "cooldown"
        assert body["lastSurfacedAt"] is not None

        response = client.get("/api/circle/shared-deposits/surface", headers=bob_headers)
        assert response.json() is None

    def test_use_without_body(self, client, connected):
        _, alice_headers, bob, bob_headers = connected
        shared = share(client, alice_headers, bob["id"])
        response = client.post(f"/api/circle/shared-deposits/{shared['id']}/use", headers=bob_headers)
        assert response.status_code == 200
        assert response.json()["status"] == 30

    def test_only_receiver_can_use_or_delete(self, client, connected):
        _, alice_headers, bob, _ = connected
        shared = share(client, alice_headers, bob["id"])

        response = client.post(
            f"/api/circle/shared-deposits/{shared['id']}/use", json={}, headers=alice_headers
        )
        assert response.status_code == 404
        response = client.delete(f"/api/circle/shared-deposits/{shared['id']}", headers=alice_headers)
        assert response.status_code == 404

    def test_delete_shared(self, client, connected):
        _, alice_headers, bob, bob_headers = connected
        shared = share(client, alice_headers, bob["id"])

        response = client.delete(f"/api/circle/shared-deposits/{shared['id']}", headers=bob_headers)
        assert response.status_code == 200
        assert client.get("/api/circle/shared-deposits/received", headers=bob_headers).json() == []

        hidden = client.get(
            "/api/circle/shared-deposits/received?includeInactive=true", headers=bob_headers
        ).json()
        assert hidden[0]["state"] == "inactive"
        assert client.get("/api/circle/shared-deposits/surface", headers=bob_headers).json() is None


class TestSummaryEndpoint:
    """Aggregated usage counts for senders."""

    def test_summary_after_helpful_use(self, client, connected):
        _, alice_headers, bob, bob_headers = connected
        shared = share(client, alice_headers, bob["id"])
        client.post(
            f"/api/circle/shared-deposits/{shared['id']}/use", json={"helpful": True}, headers=bob_headers
        )

        response = client.get("/api/circle/summary?weeks=2", headers=alice_headers)
        assert response.status_code == 200
        assert response.json() == {"totalUses": 1, "helpfulUses": 1, "weeks": 2}

    def test_summary_defaults(self, client, pair):
        _, alice_headers, _, _ = pair
        response = client.get("/api/circle/summary", headers=alice_headers)
        assert response.json() == {"totalUses": 0, "helpfulUses": 0, "weeks": 2}
        response = client.get("/api/circle/summary?weeks=6", headers=alice_headers)
        assert response.json() == {"totalUses": 0, "helpfulUses": 0, "weeks": 6}

    def test_summary_rejects_non_positive_weeks(self, client, pair):
        _, alice_headers, _, _ = pair
        assert client.get("/api/circle/summary?weeks=0", headers=alice_headers).status_code == 400
        assert client.get("/api/circle/summary?weeks=-3", headers=alice_headers).status_code == 400

    def test_receiver_usage_not_in_receiver_summary(self, client, connected):
        _, alice_headers, bob, bob_headers = connected
        shared = share(client, alice_headers, bob["id"])
        client.post(f"/api/circle/shared-deposits/{shared['id']}/use", json={}, headers=bob_headers)
        body = client.get("/api/circle/summary", headers=bob_headers).json()
        assert body["totalUses"] == 0
