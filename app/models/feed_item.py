"""
Modelo de items del feed personal.

Un FeedItem registra un producto del catálogo que llegó a un usuario por
alguna fuente (recomendaciones, guardados, listas...). Como máximo hay una
fila por (user_id, product_id): una nueva recolección del mismo producto
sobreescribe snapshot, timestamp, activity_type y source.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey,
    Enum as SQLAlchemyEnum, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, JSONType


class ActivityType(str, enum.Enum):
    """Motivo por el que un item está en el feed"""
    RECOMMENDED = "recommended"
    SAVED = "saved"
    LIKED = "liked"
    SHARED = "shared"
    BROWSED = "browsed"


# Prioridad de ranking: menor número = más arriba en el feed
ACTIVITY_PRIORITY = {
    ActivityType.SHARED: 0,
    ActivityType.SAVED: 1,
    ActivityType.LIKED: 2,
    ActivityType.RECOMMENDED: 3,
    ActivityType.BROWSED: 4,
}


class FeedItem(Base):
    __tablename__ = "user_feed_items"
    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='unique_feed_item_user_product'),
        Index('ix_feed_items_user_active_created', 'user_id', 'is_active', 'created_at'),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey("user_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(255), nullable=False, index=True)

    # Snapshot canónico: title, description, price, images, shop
    product_snapshot = Column(JSONType, nullable=False)
    activity_type = Column(
        SQLAlchemyEnum(
            ActivityType,
            name="feed_activity_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ActivityType.RECOMMENDED,
    )
    source = Column(String(100), nullable=False)  # Tag libre de procedencia

    # Baja lógica: quitar del feed nunca borra historial
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relaciones
    owner = relationship("UserProfile", back_populates="feed_items")

    def __repr__(self):
        return f"<FeedItem(id={self.id}, user_id={self.user_id}, product_id={self.product_id}, activity={self.activity_type})>"
