"""
Modelos del grafo social: aristas de seguimiento y solicitudes.

Modelo de seguimiento unidireccional: A sigue a B no implica que B siga a A.
Cada par ordenado es una fila independiente.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey,
    Enum as SQLAlchemyEnum, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class FollowRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"  # terminal
    DECLINED = "declined"  # terminal


class FollowEdge(Base):
    """
    follower_id ve el contenido compartido de following_id.
    """
    __tablename__ = "followers"
    __table_args__ = (
        UniqueConstraint('follower_id', 'following_id', name='unique_follower_following'),
        Index('ix_followers_following_followed_at', 'following_id', 'followed_at'),
    )

    id = Column(Integer, primary_key=True, index=True)
    follower_id = Column(String(255), ForeignKey("user_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    following_id = Column(String(255), ForeignKey("user_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    followed_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relaciones
    follower = relationship("UserProfile", foreign_keys=[follower_id])
    following_user = relationship("UserProfile", foreign_keys=[following_id])

    def __repr__(self):
        return f"<FollowEdge(follower={self.follower_id}, following={self.following_id})>"


class FollowRequest(Base):
    """
    Solicitud de seguimiento. Máquina de estados:
    pending -> accepted | declined (ambos terminales).
    """
    __tablename__ = "follow_requests"
    __table_args__ = (
        UniqueConstraint('requester_id', 'recipient_id', name='unique_follow_request_pair'),
        Index('ix_follow_requests_recipient_status', 'recipient_id', 'status'),
    )

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(String(255), ForeignKey("user_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String(255), ForeignKey("user_profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        SQLAlchemyEnum(
            FollowRequestStatus,
            name="follow_request_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=FollowRequestStatus.PENDING,
    )
    message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relaciones
    requester = relationship("UserProfile", foreign_keys=[requester_id])
    recipient = relationship("UserProfile", foreign_keys=[recipient_id])

    @property
    def is_resolved(self) -> bool:
        return self.status != FollowRequestStatus.PENDING

    def __repr__(self):
        return f"<FollowRequest(id={self.id}, {self.requester_id}->{self.recipient_id}, status={self.status})>"
