"""
Tests de endpoints de shares y votos.
"""

from app.services.social_graph import social_graph

API = "/api/v1"

PRODUCT = {"id": "P123", "title": "Chaqueta"}


def tally_counts(response):
    tally = response.json()["tally"]
    return tally["like_count"], tally["dislike_count"]


class TestSharedItemsEndpoints:

    def test_share_vote_unshare_flow(self, client, db, alice, bob, auth_headers):
        social_graph.follow(db, bob.user_id, alice.user_id)

        created = client.post(
            f"{API}/shared-items", json={"product": PRODUCT, "message": "Mirad"}, headers=auth_headers(alice)
        )
        assert created.status_code == 201
        item_id = created.json()["id"]

        duplicate = client.post(f"{API}/shared-items", json={"product": PRODUCT}, headers=auth_headers(alice))
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"]["outcome"] == "already_shared"

        like = client.post(f"{API}/shared-items/{item_id}/vote", json={"vote_type": "like"}, headers=auth_headers(bob))
        assert like.status_code == 200
        assert like.json()["action"] == "voted"
        assert tally_counts(like) == (1, 0)

        unlike = client.post(f"{API}/shared-items/{item_id}/vote", json={"vote_type": "like"}, headers=auth_headers(bob))
        assert tally_counts(unlike) == (0, 0)

        dislike = client.post(
            f"{API}/shared-items/{item_id}/vote", json={"vote_type": "dislike"}, headers=auth_headers(bob)
        )
        assert tally_counts(dislike) == (0, 1)

        visible = client.get(f"{API}/shared-items", headers=auth_headers(bob))
        assert [view["item"]["id"] for view in visible.json()["items"]] == [item_id]
        assert visible.json()["items"][0]["tally"]["viewer_vote"] == "dislike"

        assert client.delete(f"{API}/shared-items/{item_id}", headers=auth_headers(bob)).status_code == 403
        assert client.delete(f"{API}/shared-items/{item_id}", headers=auth_headers(alice)).status_code == 204

        assert client.get(f"{API}/shared-items", headers=auth_headers(bob)).json()["items"] == []
        tally = client.get(f"{API}/shared-items/{item_id}/tally", headers=auth_headers(bob)).json()
        assert (tally["like_count"], tally["dislike_count"]) == (0, 0)

    def test_stranger_does_not_see_shares(self, client, alice, carol, auth_headers):
        client.post(f"{API}/shared-items", json={"product": PRODUCT}, headers=auth_headers(alice))

        response = client.get(f"{API}/shared-items", headers=auth_headers(carol))

        assert response.json()["items"] == []

    def test_vote_missing_item(self, client, bob, auth_headers):
        response = client.post(f"{API}/shared-items/nope/vote", json={"vote_type": "like"}, headers=auth_headers(bob))
        assert response.status_code == 404

    def test_message_too_long_is_rejected(self, client, alice, auth_headers):
        response = client.post(
            f"{API}/shared-items", json={"product": PRODUCT, "message": "x" * 201}, headers=auth_headers(alice)
        )
        assert response.status_code == 422

    def test_share_from_feed(self, client, alice, auth_headers, ingest):
        ingest(alice, {"id": "p-7", "title": "Del feed"})

        response = client.post(
            f"{API}/shared-items/from-feed/p-7", json={"message": "Top"}, headers=auth_headers(alice)
        )

        assert response.status_code == 201
        assert response.json()["product_snapshot"]["title"] == "Del feed"
        assert response.json()["share_message"] == "Top"


class TestProfilesEndpoints:

    def test_me_and_update_bio(self, client, auth_headers):
        headers = {"X-Display-Name": "Henry Ford", "X-Avatar-Url": "https://img/henry.png"}

        me = client.get(f"{API}/profiles/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["user_id"] == "user_henry_ford"
        assert me.json()["avatar_url"] == "https://img/henry.png"

        updated = client.patch(f"{API}/profiles/me", json={"bio": "Coleccionista"}, headers=headers)
        assert updated.json()["bio"] == "Coleccionista"

    def test_unknown_profile(self, client, alice, auth_headers):
        assert client.get(f"{API}/profiles/user_nadie", headers=auth_headers(alice)).status_code == 404
