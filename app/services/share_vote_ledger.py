"""
Ledger de shares y votos.

- Un usuario tiene como máximo un share activo por producto.
- Cada (item, votante) tiene como máximo un voto; votar de nuevo lo mismo
  lo retira y votar lo contrario lo cambia.
- Los recuentos se recalculan desde las filas de votos, nunca desde
  contadores guardados.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import CatalogValidationError
from app.core.outcomes import Outcome, OperationResult
from app.db.session import store_transaction
from app.models.shared_item import SharedItem, VoteType
from app.repositories.feed_item import feed_item_repository
from app.repositories.shared_item import shared_item_repository
from app.schemas.shared_item import (
    SharedItem as SharedItemSchema,
    SharedItemView,
    SharedItemsPage,
    VoteResult,
    VoteTally,
)
from app.schemas.user_profile import UserProfile as UserProfileSchema
from app.services.social_graph import social_graph
from app.utils.product_snapshot import build_product_snapshot

logger = logging.getLogger(__name__)


def normalize_share_message(message: Optional[str]) -> Optional[str]:
    cleaned = (message or "").strip()
    if not cleaned:
        return None
    return cleaned[:get_settings().SHARE_MESSAGE_MAX_LENGTH]


def build_tally(
    item_id: str,
    counts: Optional[Dict[VoteType, int]] = None,
    viewer_vote: Optional[VoteType] = None,
) -> VoteTally:
    counts = counts or {}
    return VoteTally(
        shared_item_id=item_id,
        like_count=counts.get(VoteType.LIKE, 0),
        dislike_count=counts.get(VoteType.DISLIKE, 0),
        viewer_vote=viewer_vote,
    )


class ShareVoteLedger:

    # ============= SHARES =============

    def share(
        self,
        db: Session,
        user_id: str,
        product: Mapping[str, Any],
        message: Optional[str] = None,
    ) -> OperationResult[SharedItem]:
        """Promueve un producto del catálogo a la audiencia del usuario."""
        try:
            snapshot = build_product_snapshot(product)
        except CatalogValidationError as e:
            return OperationResult.failure(Outcome.INVALID, str(e))

        return self._create_share(db, user_id, snapshot["id"], snapshot, message)

    def share_feed_item(
        self,
        db: Session,
        user_id: str,
        product_id: str,
        message: Optional[str] = None,
    ) -> OperationResult[SharedItem]:
        """Promueve un item del feed propio reutilizando su snapshot."""
        feed_item = feed_item_repository.get_by_user_product(db, user_id=user_id, product_id=product_id)
        if not feed_item or not feed_item.is_active:
            return OperationResult.failure(Outcome.NOT_FOUND, "Item no encontrado en tu feed")

        return self._create_share(db, user_id, product_id, dict(feed_item.product_snapshot), message)

    def _create_share(
        self,
        db: Session,
        user_id: str,
        product_id: str,
        snapshot: Dict[str, Any],
        message: Optional[str],
    ) -> OperationResult[SharedItem]:
        if shared_item_repository.get_active_for_product(db, user_id=user_id, product_id=product_id):
            return OperationResult.failure(Outcome.ALREADY_SHARED, "Ya compartiste este producto")

        try:
            with store_transaction(db, "share"):
                item = shared_item_repository.create(
                    db,
                    user_id=user_id,
                    product_id=product_id,
                    product_snapshot=snapshot,
                    share_message=normalize_share_message(message),
                )
        except IntegrityError:
            # Otra petición creó el share entre la comprobación y el insert
            return OperationResult.failure(Outcome.ALREADY_SHARED, "Ya compartiste este producto")

        logger.info(f"Share {item.id}: {user_id} compartió {product_id}")
        return OperationResult.success(item)

    def unshare(self, db: Session, shared_item_id: str, requester_id: str) -> OperationResult[None]:
        """
        Retira un share propio. Es un borrado lógico: los votos se conservan.
        """
        item = shared_item_repository.get(db, shared_item_id)
        if not item or not item.is_active:
            return OperationResult.failure(Outcome.NOT_FOUND, "Item compartido no encontrado")

        if item.user_id != requester_id:
            return OperationResult.failure(Outcome.NOT_OWNER, "Solo el dueño puede retirar el share")

        with store_transaction(db, "unshare"):
            removed = shared_item_repository.deactivate(db, item_id=shared_item_id, owner_id=requester_id)

        if not removed:
            return OperationResult.failure(Outcome.NOT_FOUND, "Item compartido no encontrado")

        logger.info(f"Share {shared_item_id} retirado por {requester_id}")
        return OperationResult.success()

    # ============= VOTOS =============

    def vote(
        self,
        db: Session,
        shared_item_id: str,
        voter_id: str,
        vote_type: VoteType,
    ) -> OperationResult[VoteResult]:
        """
        Toggle de voto:
        - sin voto previo -> se registra ('voted')
        - mismo tipo -> se retira ('unvoted')
        - tipo contrario -> se cambia ('switched')

        El recuento devuelto se recalcula después de escribir.
        """
        if not shared_item_repository.get_active(db, shared_item_id):
            return OperationResult.failure(Outcome.NOT_FOUND, "Item compartido no encontrado")

        existing = shared_item_repository.get_vote(db, item_id=shared_item_id, voter_id=voter_id)
        previous = existing.vote_type if existing else None

        try:
            with store_transaction(db, "vote"):
                if previous is None:
                    shared_item_repository.insert_vote(
                        db, item_id=shared_item_id, voter_id=voter_id, vote_type=vote_type
                    )
                    action = "voted"
                elif previous == vote_type:
                    shared_item_repository.delete_vote(
                        db, item_id=shared_item_id, voter_id=voter_id, vote_type=vote_type
                    )
                    action = "unvoted"
                else:
                    shared_item_repository.change_vote(
                        db, item_id=shared_item_id, voter_id=voter_id, vote_type=vote_type
                    )
                    action = "switched"
        except IntegrityError:
            logger.warning(f"Voto rechazado por constraint en {shared_item_id} de {voter_id}")
            return OperationResult.failure(Outcome.NOT_FOUND, "Item compartido no encontrado")

        logger.debug(f"Voto {action} ({vote_type.value}) de {voter_id} en {shared_item_id}")
        return OperationResult.success(
            VoteResult(action=action, tally=self.tally(db, shared_item_id, viewer_id=voter_id))
        )

    def tally(self, db: Session, shared_item_id: str, viewer_id: Optional[str] = None) -> VoteTally:
        """
        Recuento de likes/dislikes; ceros si el item no tiene votos o ya no
        está activo. Los votos de un item retirado se conservan pero no se exponen.
        """
        if shared_item_repository.get_active(db, shared_item_id) is None:
            return build_tally(shared_item_id, None, None)

        counts = shared_item_repository.count_votes(db, [shared_item_id]).get(shared_item_id)
        viewer_vote = None
        if viewer_id:
            viewer_vote = shared_item_repository.get_voter_votes(
                db, item_ids=[shared_item_id], voter_id=viewer_id
            ).get(shared_item_id)
        return build_tally(shared_item_id, counts, viewer_vote)

    # ============= LISTADOS =============

    def list_visible(
        self,
        db: Session,
        viewer_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> SharedItemsPage:
        """
        Shares activos del viewer y de quienes sigue, más recientes primero.
        """
        settings = get_settings()
        limit = min(limit or settings.FEED_DEFAULT_LIMIT, settings.FEED_MAX_LIMIT)
        offset = max(offset, 0)

        owner_ids = social_graph.following_ids(db, viewer_id) | {viewer_id}
        items = shared_item_repository.list_by_owners(db, owner_ids=owner_ids, skip=offset, limit=limit + 1)
        page = items[:limit]

        item_ids = [item.id for item in page]
        counts = shared_item_repository.count_votes(db, item_ids)
        viewer_votes = shared_item_repository.get_voter_votes(db, item_ids=item_ids, voter_id=viewer_id)

        views = [
            SharedItemView(
                item=SharedItemSchema.model_validate(item),
                owner=UserProfileSchema.model_validate(item.owner) if item.owner else None,
                tally=build_tally(item.id, counts.get(item.id), viewer_votes.get(item.id)),
            )
            for item in page
        ]
        return SharedItemsPage(items=views, limit=limit, offset=offset, has_more=len(items) > limit)


share_vote_ledger = ShareVoteLedger()
