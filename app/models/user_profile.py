"""
Perfil de usuario del directorio.

La clave es un identificador estable derivado del display name
(ver app.core.viewer.derive_user_id). Se crea la primera vez que se ve
al usuario y nunca se borra en operación normal.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, Index
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"
    __table_args__ = (
        Index('ix_user_profiles_last_active', 'last_active'),
        Index('ix_user_profiles_handle', 'handle'),
    )

    user_id = Column(String(255), primary_key=True)
    handle = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=False)
    avatar_url = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)

    last_active = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relaciones
    feed_items = relationship("FeedItem", back_populates="owner", lazy="noload")
    shared_items = relationship("SharedItem", back_populates="owner", lazy="noload")

    def __repr__(self):
        return f"<UserProfile(user_id={self.user_id}, handle={self.handle})>"
