"""
Modelos del pool compartido: items promovidos por sus dueños y votos.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, ForeignKey,
    Enum as SQLAlchemyEnum, UniqueConstraint, Index, text
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, JSONType


class VoteType(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class SharedItem(Base):
    """
    Producto promovido por su dueño al pool comunitario.
    Un usuario no puede tener dos shares activos del mismo producto.
    """
    __tablename__ = "shared_items"
    __table_args__ = (
        Index('ix_shared_items_user_created', 'user_id', 'created_at'),
        # Un solo share activo por (user_id, product_id)
        Index(
            'uq_shared_items_active_user_product',
            'user_id', 'product_id',
            unique=True,
            postgresql_where=text('is_active'),
            sqlite_where=text('is_active'),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), ForeignKey("user_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(255), nullable=False, index=True)
    product_snapshot = Column(JSONType, nullable=False)
    share_message = Column(Text, nullable=True)

    # Retirar un share es baja lógica: los votos quedan para auditoría
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relaciones
    owner = relationship("UserProfile", back_populates="shared_items")
    votes = relationship("ItemVote", back_populates="shared_item", cascade="all, delete-orphan", lazy="noload")

    def __repr__(self):
        return f"<SharedItem(id={self.id}, user_id={self.user_id}, product_id={self.product_id})>"


class ItemVote(Base):
    """
    Voto de un usuario sobre un item compartido.
    Un votante tiene como máximo un voto por item; cambiar de opinión
    actualiza la fila en lugar de añadir otra.
    """
    __tablename__ = "item_votes"
    __table_args__ = (
        UniqueConstraint('shared_item_id', 'voter_id', name='unique_item_vote_voter'),
    )

    id = Column(Integer, primary_key=True, index=True)
    shared_item_id = Column(String(36), ForeignKey("shared_items.id", ondelete="CASCADE"), nullable=False, index=True)
    voter_id = Column(String(255), ForeignKey("user_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    vote_type = Column(
        SQLAlchemyEnum(
            VoteType,
            name="item_vote_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relaciones
    shared_item = relationship("SharedItem", back_populates="votes")
    voter = relationship("UserProfile", foreign_keys=[voter_id])

    def __repr__(self):
        return f"<ItemVote(item={self.shared_item_id}, voter={self.voter_id}, type={self.vote_type})>"
