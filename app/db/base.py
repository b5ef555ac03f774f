from app.db.base_class import Base  # noqa
from app.models.user_profile import UserProfile  # noqa
from app.models.feed_item import FeedItem  # noqa
from app.models.follow import FollowEdge, FollowRequest  # noqa
from app.models.shared_item import SharedItem, ItemVote  # noqa
# Importar aquí otros modelos para que Alembic los detecte
