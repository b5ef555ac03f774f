from datetime import datetime
from typing import Any, Collection, Dict, List, Optional

from sqlalchemy import and_, case, func, select, update
from sqlalchemy.orm import Session

from app.models.feed_item import FeedItem, ActivityType, ACTIVITY_PRIORITY
from app.repositories.base import BaseRepository, dialect_insert


class FeedItemRepository(BaseRepository[FeedItem]):

    def upsert(
        self,
        db: Session,
        *,
        user_id: str,
        product_id: str,
        product_snapshot: Dict[str, Any],
        activity_type: ActivityType,
        source: str,
        created_at: datetime,
    ) -> None:
        """
        Inserta o sobreescribe el item de (user_id, product_id).

        La última ingesta gana: snapshot, activity_type, source y timestamp
        se reemplazan y el item vuelve a estar activo.
        """
        stmt = dialect_insert(db, FeedItem).values(
            user_id=user_id,
            product_id=product_id,
            product_snapshot=product_snapshot,
            activity_type=activity_type,
            source=source,
            is_active=True,
            created_at=created_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "product_id"],
            set_={
                "product_snapshot": stmt.excluded.product_snapshot,
                "activity_type": stmt.excluded.activity_type,
                "source": stmt.excluded.source,
                "is_active": True,
                "created_at": stmt.excluded.created_at,
            },
        )
        db.execute(stmt)

    def get_by_user_product(self, db: Session, *, user_id: str, product_id: str) -> Optional[FeedItem]:
        stmt = select(FeedItem).where(
            and_(FeedItem.user_id == user_id, FeedItem.product_id == product_id)
        )
        return db.execute(stmt).scalar_one_or_none()

    def get_ranked(self, db: Session, *, user_id: str, skip: int = 0, limit: int = 20) -> List[FeedItem]:
        """
        Items activos ordenados por prioridad de activity_type y luego por fecha desc.
        """
        priority = case(
            *[(FeedItem.activity_type == activity, rank) for activity, rank in ACTIVITY_PRIORITY.items()],
            else_=len(ACTIVITY_PRIORITY),
        )
        stmt = (
            select(FeedItem)
            .where(and_(FeedItem.user_id == user_id, FeedItem.is_active == True))  # noqa: E712
            .order_by(priority.asc(), FeedItem.created_at.desc(), FeedItem.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(db.execute(stmt).scalars().all())

    def get_recent(self, db: Session, *, user_id: str, limit: int) -> List[FeedItem]:
        stmt = (
            select(FeedItem)
            .where(and_(FeedItem.user_id == user_id, FeedItem.is_active == True))  # noqa: E712
            .order_by(FeedItem.created_at.desc(), FeedItem.id.desc())
            .limit(limit)
        )
        return list(db.execute(stmt).scalars().all())

    def count_active_by_users(self, db: Session, user_ids: Collection[str]) -> Dict[str, int]:
        if not user_ids:
            return {}
        stmt = (
            select(FeedItem.user_id, func.count(FeedItem.id))
            .where(and_(FeedItem.user_id.in_(list(user_ids)), FeedItem.is_active == True))  # noqa: E712
            .group_by(FeedItem.user_id)
        )
        return {user_id: count for user_id, count in db.execute(stmt).all()}

    def deactivate(self, db: Session, *, user_id: str, product_id: str) -> int:
        return db.execute(
            update(FeedItem)
            .where(and_(
                FeedItem.user_id == user_id,
                FeedItem.product_id == product_id,
                FeedItem.is_active == True,  # noqa: E712
            ))
            .values(is_active=False)
        ).rowcount


feed_item_repository = FeedItemRepository(FeedItem)
