from datetime import datetime, timezone
from typing import Collection, List, Optional

from sqlalchemy import select, update, or_
from sqlalchemy.orm import Session

from app.models.user_profile import UserProfile
from app.repositories.base import BaseRepository, dialect_insert


class UserProfileRepository(BaseRepository[UserProfile]):

    def ensure(
        self, db: Session, *, user_id: str, handle: str, display_name: str,
        avatar_url: Optional[str] = None
    ) -> bool:
        """
        Crea el perfil si no existe. Devuelve True si se insertó.
        """
        now = datetime.now(timezone.utc)
        stmt = dialect_insert(db, UserProfile).values(
            user_id=user_id,
            handle=handle,
            display_name=display_name,
            avatar_url=avatar_url,
            last_active=now,
            created_at=now,
        ).on_conflict_do_nothing(index_elements=["user_id"])
        return db.execute(stmt).rowcount > 0

    def touch(
        self, db: Session, *, user_id: str, avatar_url: Optional[str] = None,
        display_name: Optional[str] = None
    ) -> int:
        """
        Refresca last_active (y avatar/display name si vienen).
        """
        values = {"last_active": datetime.now(timezone.utc)}
        if avatar_url:
            values["avatar_url"] = avatar_url
        if display_name:
            values["display_name"] = display_name
        return db.execute(
            update(UserProfile).where(UserProfile.user_id == user_id).values(**values)
        ).rowcount

    def update_bio(self, db: Session, *, user_id: str, bio: Optional[str]) -> int:
        return db.execute(
            update(UserProfile).where(UserProfile.user_id == user_id).values(bio=bio)
        ).rowcount

    def get_many(self, db: Session, user_ids: Collection[str]) -> List[UserProfile]:
        if not user_ids:
            return []
        stmt = select(UserProfile).where(
            UserProfile.user_id.in_(list(user_ids))
        ).order_by(UserProfile.last_active.desc())
        return list(db.execute(stmt).scalars().all())

    def list_recently_active(
        self, db: Session, *, exclude_user_id: Optional[str] = None, limit: int = 5
    ) -> List[UserProfile]:
        stmt = select(UserProfile)
        if exclude_user_id:
            stmt = stmt.where(UserProfile.user_id != exclude_user_id)
        stmt = stmt.order_by(UserProfile.last_active.desc()).limit(limit)
        return list(db.execute(stmt).scalars().all())

    def search(
        self, db: Session, *, exclude_ids: Collection[str], query: Optional[str] = None,
        skip: int = 0, limit: int = 50
    ) -> List[UserProfile]:
        """
        Perfiles fuera de exclude_ids, filtrados por display name o handle.
        """
        stmt = select(UserProfile)
        if exclude_ids:
            stmt = stmt.where(UserProfile.user_id.not_in(list(exclude_ids)))
        if query and query.strip():
            # % y _ del usuario se buscan literalmente
            term = query.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{term}%"
            stmt = stmt.where(
                or_(
                    UserProfile.display_name.ilike(pattern, escape="\\"),
                    UserProfile.handle.ilike(pattern, escape="\\"),
                )
            )
        stmt = stmt.order_by(UserProfile.last_active.desc()).offset(skip).limit(limit)
        return list(db.execute(stmt).scalars().all())


user_profile_repository = UserProfileRepository(UserProfile)
