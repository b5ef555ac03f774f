"""
Feed Curator: vista ordenada del feed de un usuario.

Orden: activity_type por prioridad (shared, saved, liked, recommended,
browsed) y dentro de cada tipo el más reciente primero.
"""

import logging
import random
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.outcomes import Outcome, OperationResult
from app.db.session import store_transaction
from app.models.feed_item import FeedItem
from app.repositories.feed_item import feed_item_repository
from app.schemas.feed_item import FeedItem as FeedItemSchema, FeedPage
from app.services.social_graph import social_graph

logger = logging.getLogger(__name__)


class FeedCuratorService:

    def _clamp_limit(self, limit: Optional[int]) -> int:
        settings = get_settings()
        if not limit or limit < 1:
            return settings.FEED_DEFAULT_LIMIT
        return min(limit, settings.FEED_MAX_LIMIT)

    def get_feed(
        self, db: Session, user_id: str, limit: Optional[int] = None, offset: int = 0
    ) -> List[FeedItem]:
        return feed_item_repository.get_ranked(
            db, user_id=user_id, skip=max(offset, 0), limit=self._clamp_limit(limit)
        )

    def get_feed_page(
        self, db: Session, user_id: str, limit: Optional[int] = None, offset: int = 0
    ) -> FeedPage:
        limit = self._clamp_limit(limit)
        offset = max(offset, 0)
        # Se pide uno extra para saber si hay más páginas
        items = feed_item_repository.get_ranked(db, user_id=user_id, skip=offset, limit=limit + 1)
        return FeedPage(
            items=[FeedItemSchema.model_validate(item) for item in items[:limit]],
            limit=limit,
            offset=offset,
            has_more=len(items) > limit,
        )

    def get_feed_for_viewer(
        self,
        db: Session,
        viewer_id: str,
        owner_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> OperationResult[FeedPage]:
        """Feed de otro usuario, solo si el viewer es él mismo o lo sigue."""
        if not social_graph.can_view(db, viewer_id, owner_id):
            return OperationResult.failure(Outcome.FORBIDDEN, "Debes seguir a este usuario para ver su feed")
        return OperationResult.success(self.get_feed_page(db, owner_id, limit=limit, offset=offset))

    def get_sample(
        self,
        db: Session,
        user_id: str,
        pool_size: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> Optional[FeedItem]:
        """
        Un item al azar entre los más recientes del usuario, para tarjetas de vista previa.
        """
        pool = feed_item_repository.get_recent(
            db, user_id=user_id, limit=pool_size or get_settings().FEED_SAMPLE_POOL_SIZE
        )
        if not pool:
            return None
        return (rng or random).choice(pool)

    def remove_from_feed(self, db: Session, user_id: str, product_id: str) -> OperationResult[None]:
        with store_transaction(db, "remove_feed_item"):
            removed = feed_item_repository.deactivate(db, user_id=user_id, product_id=product_id)

        if not removed:
            return OperationResult.failure(Outcome.NOT_FOUND, "Item no encontrado en tu feed")

        logger.info(f"Item {product_id} retirado del feed de {user_id}")
        return OperationResult.success()


feed_curator = FeedCuratorService()
