from datetime import datetime, timezone
from typing import List, Optional, Set, Tuple

from sqlalchemy import and_, delete, select, update
from sqlalchemy.orm import Session, joinedload

from app.models.follow import FollowEdge, FollowRequest, FollowRequestStatus
from app.models.user_profile import UserProfile
from app.repositories.base import BaseRepository, dialect_insert


class FollowRepository(BaseRepository[FollowEdge]):
    """
    Acceso a aristas de seguimiento y solicitudes.
    """

    # ============= ARISTAS =============

    def is_following(self, db: Session, *, follower_id: str, following_id: str) -> bool:
        stmt = select(FollowEdge.id).where(
            and_(FollowEdge.follower_id == follower_id, FollowEdge.following_id == following_id)
        )
        return db.execute(stmt).first() is not None

    def insert_edge(self, db: Session, *, follower_id: str, following_id: str) -> bool:
        """
        Inserta la arista si no existe. Devuelve True si se creó.
        """
        stmt = dialect_insert(db, FollowEdge).values(
            follower_id=follower_id,
            following_id=following_id,
            followed_at=datetime.now(timezone.utc),
        ).on_conflict_do_nothing(index_elements=["follower_id", "following_id"])
        return db.execute(stmt).rowcount > 0

    def delete_edge(self, db: Session, *, follower_id: str, following_id: str) -> int:
        return db.execute(
            delete(FollowEdge).where(
                and_(FollowEdge.follower_id == follower_id, FollowEdge.following_id == following_id)
            )
        ).rowcount

    def get_following_ids(self, db: Session, *, user_id: str) -> Set[str]:
        stmt = select(FollowEdge.following_id).where(FollowEdge.follower_id == user_id)
        return set(db.execute(stmt).scalars().all())

    def list_followers(self, db: Session, *, user_id: str) -> List[Tuple[UserProfile, datetime]]:
        """
        Perfiles que siguen a user_id, más recientes primero.
        """
        stmt = (
            select(UserProfile, FollowEdge.followed_at)
            .join(FollowEdge, FollowEdge.follower_id == UserProfile.user_id)
            .where(FollowEdge.following_id == user_id)
            .order_by(FollowEdge.followed_at.desc(), FollowEdge.id.desc())
        )
        return [(profile, followed_at) for profile, followed_at in db.execute(stmt).all()]

    def list_following(self, db: Session, *, user_id: str) -> List[Tuple[UserProfile, datetime]]:
        """
        Perfiles a los que sigue user_id, más recientes primero.
        """
        stmt = (
            select(UserProfile, FollowEdge.followed_at)
            .join(FollowEdge, FollowEdge.following_id == UserProfile.user_id)
            .where(FollowEdge.follower_id == user_id)
            .order_by(FollowEdge.followed_at.desc(), FollowEdge.id.desc())
        )
        return [(profile, followed_at) for profile, followed_at in db.execute(stmt).all()]

    # ============= SOLICITUDES =============

    def get_request(self, db: Session, request_id: int) -> Optional[FollowRequest]:
        return db.get(FollowRequest, request_id)

    def get_request_for_pair(
        self, db: Session, *, requester_id: str, recipient_id: str
    ) -> Optional[FollowRequest]:
        stmt = select(FollowRequest).where(
            and_(FollowRequest.requester_id == requester_id, FollowRequest.recipient_id == recipient_id)
        )
        return db.execute(stmt).scalar_one_or_none()

    def add_request(
        self, db: Session, *, requester_id: str, recipient_id: str, message: Optional[str] = None
    ) -> FollowRequest:
        now = datetime.now(timezone.utc)
        request = FollowRequest(
            requester_id=requester_id,
            recipient_id=recipient_id,
            status=FollowRequestStatus.PENDING,
            message=message,
            created_at=now,
            updated_at=now,
        )
        db.add(request)
        db.flush()
        return request

    def delete_request(self, db: Session, request_id: int) -> int:
        return db.execute(delete(FollowRequest).where(FollowRequest.id == request_id)).rowcount

    def delete_accepted_for_pair(self, db: Session, *, requester_id: str, recipient_id: str) -> int:
        return db.execute(
            delete(FollowRequest).where(
                and_(
                    FollowRequest.requester_id == requester_id,
                    FollowRequest.recipient_id == recipient_id,
                    FollowRequest.status == FollowRequestStatus.ACCEPTED,
                )
            )
        ).rowcount

    def resolve_request(self, db: Session, *, request_id: int, status: FollowRequestStatus) -> int:
        """
        Transición condicional pending -> status. Devuelve 0 si ya estaba resuelta.
        """
        return db.execute(
            update(FollowRequest)
            .where(and_(FollowRequest.id == request_id, FollowRequest.status == FollowRequestStatus.PENDING))
            .values(status=status, updated_at=datetime.now(timezone.utc))
        ).rowcount

    def list_pending_for_recipient(self, db: Session, *, recipient_id: str) -> List[FollowRequest]:
        stmt = (
            select(FollowRequest)
            .options(joinedload(FollowRequest.requester))
            .where(and_(
                FollowRequest.recipient_id == recipient_id,
                FollowRequest.status == FollowRequestStatus.PENDING,
            ))
            .order_by(FollowRequest.created_at.desc(), FollowRequest.id.desc())
        )
        return list(db.execute(stmt).scalars().all())

    def get_pending_outbound_ids(self, db: Session, *, requester_id: str) -> Set[str]:
        stmt = select(FollowRequest.recipient_id).where(
            and_(
                FollowRequest.requester_id == requester_id,
                FollowRequest.status == FollowRequestStatus.PENDING,
            )
        )
        return set(db.execute(stmt).scalars().all())

    def get_accepted_without_edge(self, db: Session, *, user_id: Optional[str] = None) -> List[FollowRequest]:
        """
        Solicitudes aceptadas cuya arista no existe (estado a medio aplicar).
        """
        stmt = (
            select(FollowRequest)
            .outerjoin(
                FollowEdge,
                and_(
                    FollowEdge.follower_id == FollowRequest.requester_id,
                    FollowEdge.following_id == FollowRequest.recipient_id,
                ),
            )
            .where(and_(FollowRequest.status == FollowRequestStatus.ACCEPTED, FollowEdge.id.is_(None)))
        )
        if user_id:
            stmt = stmt.where(
                (FollowRequest.requester_id == user_id) | (FollowRequest.recipient_id == user_id)
            )
        return list(db.execute(stmt).scalars().all())


follow_repository = FollowRepository(FollowEdge)
