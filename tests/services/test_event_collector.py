"""
Tests para el Event Collector: normalización, dedup y tolerancia a fallos.
"""

from unittest.mock import patch

from app.core.exceptions import TransientStoreError
from app.core.viewer import Viewer
from app.models.feed_item import ActivityType, FeedItem
from app.models.user_profile import UserProfile
from app.services.event_collector import event_collector


class TestIngest:
    """Tests de ingest()."""

    def test_stores_items_and_creates_profile(self, db):
        viewer = Viewer.from_display_name("Dana Scully", "https://img/dana.png")

        result = event_collector.ingest(
            db, viewer, [{"id": "p-1", "title": "Gafas"}], ActivityType.SAVED, "saved_products"
        )

        assert result.stored == 1
        assert result.product_ids == ["p-1"]
        profile = db.get(UserProfile, "user_dana_scully")
        assert profile is not None
        assert profile.avatar_url == "https://img/dana.png"

        item = db.query(FeedItem).filter_by(user_id=viewer.user_id).one()
        assert item.activity_type == ActivityType.SAVED
        assert item.source == "saved_products"
        assert item.product_snapshot["title"] == "Gafas"

    def test_records_without_id_are_skipped(self, db, alice):
        result = event_collector.ingest(
            db, alice, [{"title": "sin id"}, {"id": ""}, {"id": "p-1"}], ActivityType.BROWSED, "recently_viewed"
        )

        assert result.stored == 1
        assert result.skipped == 2
        assert result.failed == 0

    def test_same_product_collapses_and_last_ingest_wins(self, db, alice):
        event_collector.ingest(
            db, alice, [{"id": "p-1", "title": "Versión 1"}], ActivityType.RECOMMENDED, "recommended_products"
        )
        event_collector.ingest(
            db, alice, [{"id": "p-1", "title": "Versión 2"}], ActivityType.LIKED, "liked_products"
        )

        items = db.query(FeedItem).filter_by(user_id=alice.user_id, product_id="p-1").all()
        assert len(items) == 1
        db.refresh(items[0])
        assert items[0].product_snapshot["title"] == "Versión 2"
        assert items[0].activity_type == ActivityType.LIKED
        assert items[0].source == "liked_products"
        assert items[0].is_active is True

    def test_reingest_reactivates_removed_item(self, db, alice, ingest):
        from app.services.feed_curator import feed_curator

        ingest(alice, {"id": "p-1"})
        feed_curator.remove_from_feed(db, alice.user_id, "p-1")
        ingest(alice, {"id": "p-1"})

        assert [item.product_id for item in feed_curator.get_feed(db, alice.user_id)] == ["p-1"]

    def test_store_failure_on_one_item_does_not_abort_batch(self, db, alice):
        from app.repositories.feed_item import feed_item_repository

        original_upsert = feed_item_repository.upsert

        def flaky_upsert(db, **kwargs):
            if kwargs["product_id"] == "p-2":
                raise TransientStoreError("connection reset", operation="ingest_feed_item")
            return original_upsert(db, **kwargs)

        with patch.object(feed_item_repository, "upsert", side_effect=flaky_upsert):
            result = event_collector.ingest(
                db, alice, [{"id": "p-1"}, {"id": "p-2"}, {"id": "p-3"}],
                ActivityType.RECOMMENDED, "recommended_products",
            )

        assert result.stored == 2
        assert result.failed == 1
        assert result.product_ids == ["p-1", "p-3"]

    def test_mock_identity_is_not_collected(self, db):
        viewer = Viewer.from_display_name("Mock User")

        result = event_collector.ingest(db, viewer, [{"id": "p-1"}], ActivityType.SAVED, "saved_products")

        assert result.ignored_identity is True
        assert result.stored == 0
        assert db.get(UserProfile, viewer.user_id) is None
        assert db.query(FeedItem).count() == 0

    def test_shop_records_are_expanded(self, db, alice):
        result = event_collector.ingest(
            db, alice, [{"id": "shop-1", "products": [{"id": "p-1"}, {"id": "p-2"}]}],
            ActivityType.RECOMMENDED, "followed_shops",
        )
        assert result.product_ids == ["p-1", "p-2"]

    def test_successful_batch_refreshes_last_active(self, db):
        viewer = Viewer.from_display_name("Eve Adams")
        event_collector.ingest(db, viewer, [], ActivityType.SAVED, "saved_products")
        before = db.get(UserProfile, viewer.user_id).last_active

        event_collector.ingest(db, viewer, [{"id": "p-1"}], ActivityType.SAVED, "saved_products")

        db.expire_all()
        assert db.get(UserProfile, viewer.user_id).last_active >= before


class TestCollectSources:

    def test_uses_default_activity_per_source(self, db, alice):
        results = event_collector.collect_sources(db, alice, {
            "saved_products": [{"id": "p-1"}],
            "recommended_products": [{"id": "p-2"}],
            "something_new": [{"id": "p-3"}],
        })

        assert set(results) == {"saved_products", "recommended_products", "something_new"}
        by_product = {item.product_id: item.activity_type for item in db.query(FeedItem).all()}
        assert by_product == {
            "p-1": ActivityType.SAVED,
            "p-2": ActivityType.RECOMMENDED,
            "p-3": ActivityType.BROWSED,
        }
