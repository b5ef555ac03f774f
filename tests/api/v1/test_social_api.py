"""
Tests de endpoints del grafo social.
"""

from unittest.mock import patch

from app.core.exceptions import TransientStoreError
from app.services.social_graph import social_graph

API = "/api/v1/social"


class TestFollowRequests:

    def test_request_accept_flow(self, client, alice, bob, auth_headers):
        created = client.post(
            f"{API}/requests",
            json={"recipient_id": bob.user_id, "message": "Hola"},
            headers=auth_headers(alice),
        )
        assert created.status_code == 201
        request_id = created.json()["id"]
        assert created.json()["status"] == "pending"

        pending = client.get(f"{API}/requests/pending", headers=auth_headers(bob))
        assert [r["id"] for r in pending.json()] == [request_id]
        assert pending.json()[0]["requester"]["user_id"] == alice.user_id

        accepted = client.post(f"{API}/requests/{request_id}/accept", headers=auth_headers(bob))
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "accepted"

        again = client.post(f"{API}/requests/{request_id}/decline", headers=auth_headers(bob))
        assert again.status_code == 409
        assert again.json()["detail"]["outcome"] == "already_resolved"

        following = client.get(f"{API}/following", headers=auth_headers(alice))
        assert following.json()["total"] == 1
        assert following.json()["users"][0]["profile"]["user_id"] == bob.user_id

    def test_duplicate_request_conflict(self, client, alice, bob, auth_headers):
        client.post(f"{API}/requests", json={"recipient_id": bob.user_id}, headers=auth_headers(alice))
        response = client.post(f"{API}/requests", json={"recipient_id": bob.user_id}, headers=auth_headers(alice))

        assert response.status_code == 409
        assert response.json()["detail"]["outcome"] == "already_pending"

    def test_requester_cannot_accept_own_request(self, client, alice, bob, auth_headers):
        created = client.post(f"{API}/requests", json={"recipient_id": bob.user_id}, headers=auth_headers(alice))

        response = client.post(f"{API}/requests/{created.json()['id']}/accept", headers=auth_headers(alice))

        assert response.status_code == 404

    def test_unknown_recipient(self, client, alice, auth_headers):
        response = client.post(f"{API}/requests", json={"recipient_id": "user_nadie"}, headers=auth_headers(alice))
        assert response.status_code == 404

    def test_store_failure_is_service_unavailable(self, client, alice, bob, auth_headers):
        with patch.object(social_graph, "send_request", side_effect=TransientStoreError("timeout", "send_follow_request")):
            response = client.post(f"{API}/requests", json={"recipient_id": bob.user_id}, headers=auth_headers(alice))

        assert response.status_code == 503
        assert response.json()["detail"]["outcome"] == "transient_store_error"


class TestFollowing:

    def test_follow_and_unfollow(self, client, alice, bob, auth_headers):
        assert client.post(f"{API}/following/{bob.user_id}", headers=auth_headers(alice)).status_code == 204
        assert client.post(f"{API}/following/{bob.user_id}", headers=auth_headers(alice)).status_code == 409

        followers = client.get(f"{API}/followers", headers=auth_headers(bob))
        assert followers.json()["total"] == 1

        assert client.delete(f"{API}/following/{bob.user_id}", headers=auth_headers(alice)).status_code == 204
        assert client.delete(f"{API}/following/{bob.user_id}", headers=auth_headers(alice)).status_code == 404

    def test_follow_self_is_bad_request(self, client, alice, auth_headers):
        assert client.post(f"{API}/following/{alice.user_id}", headers=auth_headers(alice)).status_code == 400

    def test_discover(self, client, db, alice, bob, carol, auth_headers):
        social_graph.follow(db, alice.user_id, bob.user_id)

        response = client.get(f"{API}/discover", headers=auth_headers(alice))

        assert [p["user_id"] for p in response.json()] == [carol.user_id]

    def test_reconcile(self, client, alice, auth_headers):
        response = client.post(f"{API}/reconcile", headers=auth_headers(alice))
        assert response.status_code == 200
        assert response.json() == {"repaired": 0}
