"""
Tests para shares y votos: unicidad, ley del toggle y visibilidad.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.outcomes import Outcome
from app.models.shared_item import ItemVote, SharedItem, VoteType
from app.repositories.shared_item import shared_item_repository
from app.services.share_vote_ledger import share_vote_ledger
from app.services.social_graph import social_graph

PRODUCT = {"id": "P123", "title": "Chaqueta", "images": [{"url": "https://cdn/p123.jpg"}]}


@pytest.fixture
def shared(db, alice):
    """Item P123 compartido por Alice."""
    return share_vote_ledger.share(db, alice.user_id, PRODUCT, "Mirad esto").value


def counts(tally):
    return tally.like_count, tally.dislike_count


class TestShare:
    """Tests de share()."""

    def test_share_stores_snapshot(self, db, alice):
        result = share_vote_ledger.share(db, alice.user_id, PRODUCT, "  Mirad esto  ")

        assert result.ok
        assert result.value.product_id == "P123"
        assert result.value.share_message == "Mirad esto"
        assert result.value.product_snapshot["images"][0]["url"] == "https://cdn/p123.jpg"

    def test_second_active_share_is_conflict(self, db, alice, shared):
        result = share_vote_ledger.share(db, alice.user_id, PRODUCT)

        assert result.outcome == Outcome.ALREADY_SHARED
        assert db.query(SharedItem).count() == 1

    def test_conflict_detected_by_unique_index(self, db, alice, shared):
        """Dos shares simultáneos: la comprobación previa no ve el otro."""
        with patch.object(shared_item_repository, "get_active_for_product", return_value=None):
            result = share_vote_ledger.share(db, alice.user_id, PRODUCT)

        assert result.outcome == Outcome.ALREADY_SHARED
        assert db.query(SharedItem).count() == 1

    def test_other_users_can_share_same_product(self, db, bob, shared):
        assert share_vote_ledger.share(db, bob.user_id, PRODUCT).ok

    def test_can_share_again_after_unshare(self, db, alice, shared):
        share_vote_ledger.unshare(db, shared.id, alice.user_id)
        assert share_vote_ledger.share(db, alice.user_id, PRODUCT).ok

    def test_message_is_capped(self, db, alice):
        result = share_vote_ledger.share(db, alice.user_id, PRODUCT, "x" * 500)
        assert len(result.value.share_message) == 200

    def test_blank_message_is_none(self, db, alice):
        assert share_vote_ledger.share(db, alice.user_id, PRODUCT, "   ").value.share_message is None

    def test_product_without_id_is_invalid(self, db, alice):
        assert share_vote_ledger.share(db, alice.user_id, {"title": "x"}).outcome == Outcome.INVALID

    def test_share_from_feed_reuses_snapshot(self, db, alice, ingest):
        ingest(alice, {"id": "p-9", "title": "Desde el feed"})

        result = share_vote_ledger.share_feed_item(db, alice.user_id, "p-9")

        assert result.ok
        assert result.value.product_snapshot["title"] == "Desde el feed"

    def test_share_from_feed_missing_item(self, db, alice):
        assert share_vote_ledger.share_feed_item(db, alice.user_id, "nope").outcome == Outcome.NOT_FOUND


class TestVoteToggle:
    """Ley del toggle de votos."""

    def test_like_then_like_returns_to_baseline(self, db, bob, shared):
        first = share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.LIKE).value
        second = share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.LIKE).value

        assert first.action == "voted"
        assert counts(first.tally) == (1, 0)
        assert second.action == "unvoted"
        assert counts(second.tally) == (0, 0)
        assert second.tally.viewer_vote is None
        assert db.query(ItemVote).count() == 0

    def test_like_then_dislike_switches(self, db, bob, shared):
        share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.LIKE)
        result = share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.DISLIKE).value

        assert result.action == "switched"
        assert counts(result.tally) == (0, 1)
        assert result.tally.viewer_vote == VoteType.DISLIKE
        assert db.query(ItemVote).count() == 1

    def test_votes_from_different_voters_are_independent(self, db, bob, carol, shared):
        share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.LIKE)
        result = share_vote_ledger.vote(db, shared.id, carol.user_id, VoteType.LIKE).value

        assert counts(result.tally) == (2, 0)

    def test_missing_item(self, db, bob):
        assert share_vote_ledger.vote(db, "nope", bob.user_id, VoteType.LIKE).outcome == Outcome.NOT_FOUND

    def test_inactive_item_rejects_votes(self, db, alice, bob, shared):
        share_vote_ledger.unshare(db, shared.id, alice.user_id)
        assert share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.LIKE).outcome == Outcome.NOT_FOUND

    def test_constraint_failure_surfaces_not_found(self, db, bob, shared):
        failure = IntegrityError("INSERT INTO item_votes", {}, Exception("FOREIGN KEY constraint failed"))
        with patch.object(shared_item_repository, "insert_vote", side_effect=failure):
            result = share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.LIKE)
        assert result.outcome == Outcome.NOT_FOUND

    def test_tally_for_item_without_votes(self, db, shared):
        tally = share_vote_ledger.tally(db, shared.id)
        assert counts(tally) == (0, 0)
        assert tally.viewer_vote is None


class TestUnshare:

    def test_only_owner_can_unshare(self, db, bob, shared):
        assert share_vote_ledger.unshare(db, shared.id, bob.user_id).outcome == Outcome.NOT_OWNER

    def test_unshare_missing(self, db, alice):
        assert share_vote_ledger.unshare(db, "nope", alice.user_id).outcome == Outcome.NOT_FOUND

    def test_unshare_twice(self, db, alice, shared):
        share_vote_ledger.unshare(db, shared.id, alice.user_id)
        assert share_vote_ledger.unshare(db, shared.id, alice.user_id).outcome == Outcome.NOT_FOUND


class TestVisibility:
    """El pool visible es el propio más el de los seguidos."""

    def test_contains_only_own_and_followed(self, db, alice, bob, carol):
        share_vote_ledger.share(db, alice.user_id, {"id": "a-1"})
        share_vote_ledger.share(db, bob.user_id, {"id": "b-1"})
        share_vote_ledger.share(db, carol.user_id, {"id": "c-1"})
        social_graph.follow(db, alice.user_id, bob.user_id)

        page = share_vote_ledger.list_visible(db, alice.user_id)

        owners = {view.item.user_id for view in page.items}
        assert owners == {alice.user_id, bob.user_id}
        assert {view.item.product_id for view in page.items} == {"a-1", "b-1"}

    def test_includes_tally_and_viewer_vote(self, db, alice, bob, shared):
        social_graph.follow(db, bob.user_id, alice.user_id)
        share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.DISLIKE)

        page = share_vote_ledger.list_visible(db, bob.user_id)

        assert len(page.items) == 1
        view = page.items[0]
        assert view.owner.user_id == alice.user_id
        assert counts(view.tally) == (0, 1)
        assert view.tally.viewer_vote == VoteType.DISLIKE


class TestP123Scenario:

    def test_full_flow(self, db, alice, bob, shared):
        social_graph.follow(db, bob.user_id, alice.user_id)
        assert counts(share_vote_ledger.tally(db, shared.id)) == (0, 0)

        assert counts(share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.LIKE).value.tally) == (1, 0)
        assert counts(share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.LIKE).value.tally) == (0, 0)
        assert counts(share_vote_ledger.vote(db, shared.id, bob.user_id, VoteType.DISLIKE).value.tally) == (0, 1)

        assert share_vote_ledger.unshare(db, shared.id, alice.user_id).ok

        assert share_vote_ledger.list_visible(db, bob.user_id).items == []
        assert share_vote_ledger.list_visible(db, alice.user_id).items == []
        vote = db.query(ItemVote).filter_by(shared_item_id=shared.id, voter_id=bob.user_id).one()
        assert vote.vote_type == VoteType.DISLIKE

        retracted = share_vote_ledger.tally(db, shared.id, viewer_id=bob.user_id)
        assert counts(retracted) == (0, 0)
        assert retracted.viewer_vote is None
