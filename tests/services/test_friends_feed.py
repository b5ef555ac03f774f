import random

from app.services.friends_feed import friends_feed
from app.services.social_graph import social_graph


class TestFriendsFeed:
    """Tests para las tarjetas del Friends Feed."""

    def test_cards_for_followed_users(self, db, alice, bob, carol, ingest):
        ingest(bob, {"id": "b-1"}, {"id": "b-2"})
        social_graph.follow(db, alice.user_id, bob.user_id)
        social_graph.follow(db, alice.user_id, carol.user_id)

        cards = friends_feed.get_cards(db, alice.user_id, rng=random.Random(1))

        by_user = {card.profile.user_id: card for card in cards}
        assert set(by_user) == {bob.user_id, carol.user_id}
        assert by_user[bob.user_id].feed_item_count == 2
        assert by_user[bob.user_id].sample_item.product_id in {"b-1", "b-2"}
        assert by_user[carol.user_id].feed_item_count == 0
        assert by_user[carol.user_id].sample_item is None

    def test_ordered_by_last_active(self, db, alice, bob, carol, ingest):
        social_graph.follow(db, alice.user_id, bob.user_id)
        social_graph.follow(db, alice.user_id, carol.user_id)
        ingest(bob, {"id": "b-1"})

        cards = friends_feed.get_cards(db, alice.user_id)

        assert cards[0].profile.user_id == bob.user_id

    def test_falls_back_to_recent_profiles(self, db, make_viewer, alice):
        others = [make_viewer(f"User {i}") for i in range(7)]

        cards = friends_feed.get_cards(db, alice.user_id)

        assert len(cards) == 5
        assert alice.user_id not in {card.profile.user_id for card in cards}
        assert {card.profile.user_id for card in cards} <= {viewer.user_id for viewer in others}
