import logging
import random
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.repositories.feed_item import feed_item_repository
from app.repositories.user_profile import user_profile_repository
from app.schemas.feed_item import FeedItem as FeedItemSchema, FriendCard
from app.schemas.user_profile import UserProfile as UserProfileSchema
from app.services.feed_curator import feed_curator
from app.services.social_graph import social_graph

logger = logging.getLogger(__name__)


class FriendsFeedService:
    """
    Tarjetas de los usuarios seguidos: perfil, recuento de items y una muestra.
    """

    def get_cards(
        self, db: Session, viewer_id: str, rng: Optional[random.Random] = None
    ) -> List[FriendCard]:
        """
        Si el viewer no sigue a nadie se muestran los usuarios activos más
        recientes para que la pantalla no quede vacía.
        """
        following = social_graph.following_ids(db, viewer_id)
        if following:
            profiles = user_profile_repository.get_many(db, following)
        else:
            profiles = user_profile_repository.list_recently_active(
                db, exclude_user_id=viewer_id, limit=get_settings().FRIENDS_FEED_FALLBACK_LIMIT
            )
            logger.debug(f"{viewer_id} no sigue a nadie, usando {len(profiles)} perfiles recientes")

        counts = feed_item_repository.count_active_by_users(db, [p.user_id for p in profiles])

        cards = []
        for profile in profiles:
            sample = feed_curator.get_sample(db, profile.user_id, rng=rng)
            cards.append(
                FriendCard(
                    profile=UserProfileSchema.model_validate(profile),
                    feed_item_count=counts.get(profile.user_id, 0),
                    sample_item=FeedItemSchema.model_validate(sample) if sample else None,
                )
            )
        return cards


friends_feed = FriendsFeedService()
