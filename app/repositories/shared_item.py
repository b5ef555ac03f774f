from datetime import datetime, timezone
from typing import Any, Collection, Dict, List, Optional

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.orm import Session, joinedload

from app.models.shared_item import SharedItem, ItemVote, VoteType
from app.repositories.base import BaseRepository, dialect_insert


class SharedItemRepository(BaseRepository[SharedItem]):

    def get_active(self, db: Session, item_id: str) -> Optional[SharedItem]:
        stmt = select(SharedItem).where(and_(SharedItem.id == item_id, SharedItem.is_active == True))  # noqa: E712
        return db.execute(stmt).scalar_one_or_none()

    def get_active_for_product(self, db: Session, *, user_id: str, product_id: str) -> Optional[SharedItem]:
        stmt = select(SharedItem).where(
            and_(
                SharedItem.user_id == user_id,
                SharedItem.product_id == product_id,
                SharedItem.is_active == True,  # noqa: E712
            )
        )
        return db.execute(stmt).scalars().first()

    def create(
        self, db: Session, *, user_id: str, product_id: str,
        product_snapshot: Dict[str, Any], share_message: Optional[str]
    ) -> SharedItem:
        item = SharedItem(
            user_id=user_id,
            product_id=product_id,
            product_snapshot=product_snapshot,
            share_message=share_message,
            is_active=True,
            created_at=datetime.now(timezone.utc),
        )
        return self.add(db, item)

    def deactivate(self, db: Session, *, item_id: str, owner_id: str) -> int:
        return db.execute(
            update(SharedItem)
            .where(and_(
                SharedItem.id == item_id,
                SharedItem.user_id == owner_id,
                SharedItem.is_active == True,  # noqa: E712
            ))
            .values(is_active=False)
        ).rowcount

    def list_by_owners(
        self, db: Session, *, owner_ids: Collection[str], skip: int = 0, limit: int = 20
    ) -> List[SharedItem]:
        """
        Shares activos de los dueños indicados, más recientes primero.
        """
        if not owner_ids:
            return []
        stmt = (
            select(SharedItem)
            .options(joinedload(SharedItem.owner))
            .where(and_(SharedItem.user_id.in_(list(owner_ids)), SharedItem.is_active == True))  # noqa: E712
            .order_by(SharedItem.created_at.desc(), SharedItem.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(db.execute(stmt).scalars().all())

    # ============= VOTOS =============

    def get_vote(self, db: Session, *, item_id: str, voter_id: str) -> Optional[ItemVote]:
        stmt = select(ItemVote).where(
            and_(ItemVote.shared_item_id == item_id, ItemVote.voter_id == voter_id)
        )
        return db.execute(stmt).scalar_one_or_none()

    def insert_vote(self, db: Session, *, item_id: str, voter_id: str, vote_type: VoteType) -> None:
        """
        Inserta el voto. Si otra petición del mismo votante ganó la carrera,
        la fila converge al tipo pedido en lugar de duplicarse.
        """
        stmt = dialect_insert(db, ItemVote).values(
            shared_item_id=item_id,
            voter_id=voter_id,
            vote_type=vote_type,
            created_at=datetime.now(timezone.utc),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["shared_item_id", "voter_id"],
            set_={"vote_type": stmt.excluded.vote_type},
        )
        db.execute(stmt)

    def delete_vote(self, db: Session, *, item_id: str, voter_id: str, vote_type: VoteType) -> int:
        return db.execute(
            delete(ItemVote).where(
                and_(
                    ItemVote.shared_item_id == item_id,
                    ItemVote.voter_id == voter_id,
                    ItemVote.vote_type == vote_type,
                )
            )
        ).rowcount

    def change_vote(self, db: Session, *, item_id: str, voter_id: str, vote_type: VoteType) -> int:
        return db.execute(
            update(ItemVote)
            .where(and_(ItemVote.shared_item_id == item_id, ItemVote.voter_id == voter_id))
            .values(vote_type=vote_type, created_at=datetime.now(timezone.utc))
        ).rowcount

    def count_votes(self, db: Session, item_ids: Collection[str]) -> Dict[str, Dict[VoteType, int]]:
        """
        Recuento por item y tipo, calculado desde las filas de votos.
        """
        if not item_ids:
            return {}
        stmt = (
            select(ItemVote.shared_item_id, ItemVote.vote_type, func.count(ItemVote.id))
            .where(ItemVote.shared_item_id.in_(list(item_ids)))
            .group_by(ItemVote.shared_item_id, ItemVote.vote_type)
        )
        counts: Dict[str, Dict[VoteType, int]] = {}
        for item_id, vote_type, count in db.execute(stmt).all():
            counts.setdefault(item_id, {})[vote_type] = count
        return counts

    def get_voter_votes(self, db: Session, *, item_ids: Collection[str], voter_id: str) -> Dict[str, VoteType]:
        if not item_ids:
            return {}
        stmt = select(ItemVote.shared_item_id, ItemVote.vote_type).where(
            and_(ItemVote.shared_item_id.in_(list(item_ids)), ItemVote.voter_id == voter_id)
        )
        return {item_id: vote_type for item_id, vote_type in db.execute(stmt).all()}


shared_item_repository = SharedItemRepository(SharedItem)
