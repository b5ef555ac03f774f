"""
Directorio de usuarios: perfiles por user_id estable.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.outcomes import Outcome, OperationResult
from app.core.viewer import Viewer, fallback_avatar_url
from app.db.session import store_transaction
from app.models.user_profile import UserProfile
from app.repositories.user_profile import user_profile_repository

logger = logging.getLogger(__name__)


class UserDirectoryService:

    def get_profile(self, db: Session, user_id: str) -> Optional[UserProfile]:
        return user_profile_repository.get(db, user_id)

    def ensure_profile(self, db: Session, viewer: Viewer) -> bool:
        """
        Crea el perfil la primera vez que se ve al usuario.

        Returns:
            True si el perfil se creó en esta llamada
        """
        with store_transaction(db, "ensure_profile"):
            created = user_profile_repository.ensure(
                db,
                user_id=viewer.user_id,
                handle=viewer.handle,
                display_name=viewer.display_name,
                avatar_url=viewer.avatar_url or fallback_avatar_url(viewer.display_name),
            )
        if created:
            logger.info(f"Perfil creado para {viewer.user_id}")
        return created

    def touch(self, db: Session, viewer: Viewer) -> None:
        """Refresca last_active y, si llega, el avatar del perfil."""
        with store_transaction(db, "touch_profile"):
            user_profile_repository.touch(
                db,
                user_id=viewer.user_id,
                avatar_url=viewer.avatar_url,
                display_name=viewer.display_name,
            )

    def update_bio(self, db: Session, user_id: str, bio: Optional[str]) -> OperationResult[UserProfile]:
        """
        Actualiza la bio propia. Vacía se guarda como NULL; se recorta al máximo permitido.
        """
        settings = get_settings()
        cleaned = (bio or "").strip()[:settings.BIO_MAX_LENGTH] or None

        with store_transaction(db, "update_bio"):
            updated = user_profile_repository.update_bio(db, user_id=user_id, bio=cleaned)

        if not updated:
            return OperationResult.failure(Outcome.NOT_FOUND, "Perfil no encontrado")

        return OperationResult.success(user_profile_repository.get(db, user_id))


user_directory = UserDirectoryService()
