"""
Grafo social: solicitudes de seguimiento, aristas y visibilidad.

La relación es dirigida: aceptar una solicitud crea la arista
requester -> recipient. Una solicitud es pending, accepted o declined y
solo sale de pending una vez (la transición es condicional en base de datos).
"""

import logging
from typing import List, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.outcomes import Outcome, OperationResult
from app.db.session import store_transaction
from app.models.follow import FollowRequest, FollowRequestStatus
from app.models.user_profile import UserProfile
from app.repositories.follow import follow_repository
from app.repositories.user_profile import user_profile_repository
from app.schemas.follow import FollowDecision, FollowEntry
from app.schemas.user_profile import UserProfile as UserProfileSchema

logger = logging.getLogger(__name__)


class SocialGraphService:

    # ============= SOLICITUDES =============

    def send_request(
        self,
        db: Session,
        requester_id: str,
        recipient_id: str,
        message: Optional[str] = None,
    ) -> OperationResult[FollowRequest]:
        """
        Envía una solicitud de seguimiento.

        Si existe una solicitud ya resuelta para el par se reemplaza por una
        nueva pending en la misma transacción.
        """
        if requester_id == recipient_id:
            return OperationResult.failure(Outcome.INVALID, "No puedes seguirte a ti mismo")

        if not user_profile_repository.get(db, recipient_id):
            return OperationResult.failure(Outcome.NOT_FOUND, "Usuario destino no encontrado")

        if follow_repository.is_following(db, follower_id=requester_id, following_id=recipient_id):
            return OperationResult.failure(Outcome.ALREADY_FOLLOWING, "Ya sigues a este usuario")

        existing = follow_repository.get_request_for_pair(
            db, requester_id=requester_id, recipient_id=recipient_id
        )
        if existing and existing.status == FollowRequestStatus.PENDING:
            return OperationResult.failure(Outcome.ALREADY_PENDING, "Ya existe una solicitud pendiente")

        if existing and existing.status == FollowRequestStatus.ACCEPTED:
            # Aceptada pero sin arista: se completa en lugar de pedir de nuevo
            with store_transaction(db, "repair_follow_edge"):
                follow_repository.insert_edge(db, follower_id=requester_id, following_id=recipient_id)
            logger.info(f"Arista reparada {requester_id} -> {recipient_id}")
            return OperationResult.failure(Outcome.ALREADY_FOLLOWING, "Ya sigues a este usuario")

        settings = get_settings()
        cleaned = (message or "").strip()[:settings.FOLLOW_REQUEST_MESSAGE_MAX_LENGTH] or None

        try:
            with store_transaction(db, "send_follow_request"):
                if existing:
                    follow_repository.delete_request(db, existing.id)
                request = follow_repository.add_request(
                    db, requester_id=requester_id, recipient_id=recipient_id, message=cleaned
                )
        except IntegrityError:
            logger.info(f"Solicitud concurrente {requester_id} -> {recipient_id}")
            return OperationResult.failure(Outcome.ALREADY_PENDING, "Ya existe una solicitud pendiente")

        logger.info(f"Solicitud de seguimiento {request.id}: {requester_id} -> {recipient_id}")
        return OperationResult.success(request)

    def respond(
        self,
        db: Session,
        request_id: int,
        decision: FollowDecision,
        responder_id: Optional[str] = None,
    ) -> OperationResult[FollowRequest]:
        """
        Acepta o rechaza una solicitud pendiente.

        Args:
            db: Sesión de base de datos
            request_id: ID de la solicitud
            decision: accept o decline
            responder_id: Si se indica, debe ser el destinatario de la solicitud

        Returns:
            OperationResult con la solicitud resuelta, ALREADY_RESOLVED si otra
            respuesta llegó antes, o NOT_FOUND
        """
        request = follow_repository.get_request(db, request_id)
        if not request or (responder_id is not None and request.recipient_id != responder_id):
            return OperationResult.failure(Outcome.NOT_FOUND, "Solicitud no encontrada")

        if request.is_resolved:
            return OperationResult.failure(Outcome.ALREADY_RESOLVED, "La solicitud ya fue respondida")

        requester_id = request.requester_id
        recipient_id = request.recipient_id
        new_status = (
            FollowRequestStatus.ACCEPTED if decision == FollowDecision.ACCEPT
            else FollowRequestStatus.DECLINED
        )

        with store_transaction(db, "respond_follow_request"):
            updated = follow_repository.resolve_request(db, request_id=request_id, status=new_status)
            if updated and new_status == FollowRequestStatus.ACCEPTED:
                follow_repository.insert_edge(db, follower_id=requester_id, following_id=recipient_id)

        if not updated:
            return OperationResult.failure(Outcome.ALREADY_RESOLVED, "La solicitud ya fue respondida")

        db.refresh(request)
        logger.info(f"Solicitud {request_id} {new_status.value}: {requester_id} -> {recipient_id}")
        return OperationResult.success(request)

    def list_pending_requests(self, db: Session, user_id: str) -> List[FollowRequest]:
        """Solicitudes pendientes recibidas por el usuario, más recientes primero."""
        return follow_repository.list_pending_for_recipient(db, recipient_id=user_id)

    # ============= ARISTAS =============

    def follow(self, db: Session, follower_id: str, target_id: str) -> OperationResult[None]:
        """Seguimiento directo, sin pasar por solicitud."""
        if follower_id == target_id:
            return OperationResult.failure(Outcome.INVALID, "No puedes seguirte a ti mismo")

        if not user_profile_repository.get(db, target_id):
            return OperationResult.failure(Outcome.NOT_FOUND, "Usuario destino no encontrado")

        with store_transaction(db, "follow"):
            created = follow_repository.insert_edge(db, follower_id=follower_id, following_id=target_id)

        if not created:
            return OperationResult.failure(Outcome.ALREADY_FOLLOWING, "Ya sigues a este usuario")

        logger.info(f"{follower_id} ahora sigue a {target_id}")
        return OperationResult.success()

    def unfollow(self, db: Session, follower_id: str, target_id: str) -> OperationResult[None]:
        """
        Elimina la arista y la solicitud aceptada del par, para que reconcile
        no la recree y se pueda volver a solicitar.
        """
        with store_transaction(db, "unfollow"):
            removed = follow_repository.delete_edge(db, follower_id=follower_id, following_id=target_id)
            if removed:
                follow_repository.delete_accepted_for_pair(
                    db, requester_id=follower_id, recipient_id=target_id
                )

        if not removed:
            return OperationResult.failure(Outcome.NOT_FOUND, "No sigues a este usuario")

        logger.info(f"{follower_id} dejó de seguir a {target_id}")
        return OperationResult.success()

    def is_following(self, db: Session, follower_id: str, target_id: str) -> bool:
        return follow_repository.is_following(db, follower_id=follower_id, following_id=target_id)

    def following_ids(self, db: Session, user_id: str) -> Set[str]:
        return follow_repository.get_following_ids(db, user_id=user_id)

    def can_view(self, db: Session, viewer_id: str, owner_id: str) -> bool:
        """El contenido de owner es visible para él mismo y para quien lo sigue."""
        return viewer_id == owner_id or self.is_following(db, viewer_id, owner_id)

    def list_followers(self, db: Session, user_id: str) -> List[FollowEntry]:
        return [
            FollowEntry(profile=UserProfileSchema.model_validate(profile), followed_at=followed_at)
            for profile, followed_at in follow_repository.list_followers(db, user_id=user_id)
        ]

    def list_following(self, db: Session, user_id: str) -> List[FollowEntry]:
        return [
            FollowEntry(profile=UserProfileSchema.model_validate(profile), followed_at=followed_at)
            for profile, followed_at in follow_repository.list_following(db, user_id=user_id)
        ]

    def list_discoverable(
        self,
        db: Session,
        user_id: str,
        query: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[UserProfile]:
        """
        Usuarios que aún no sigue ni tiene solicitados, filtrables por nombre.
        """
        settings = get_settings()
        limit = min(limit or settings.DISCOVER_DEFAULT_LIMIT, settings.FEED_MAX_LIMIT)

        exclude = {user_id}
        exclude |= follow_repository.get_following_ids(db, user_id=user_id)
        exclude |= follow_repository.get_pending_outbound_ids(db, requester_id=user_id)

        return user_profile_repository.search(
            db, exclude_ids=exclude, query=query, skip=skip, limit=limit
        )

    def reconcile(self, db: Session, user_id: Optional[str] = None) -> int:
        """
        Repara solicitudes aceptadas cuya arista no llegó a crearse.

        Returns:
            Número de aristas creadas
        """
        orphaned = follow_repository.get_accepted_without_edge(db, user_id=user_id)
        if not orphaned:
            return 0

        repaired = 0
        with store_transaction(db, "reconcile_follow_edges"):
            for request in orphaned:
                if follow_repository.insert_edge(
                    db, follower_id=request.requester_id, following_id=request.recipient_id
                ):
                    repaired += 1

        if repaired:
            logger.warning(f"Reconciliación: {repaired} aristas de seguimiento reparadas")
        return repaired


social_graph = SocialGraphService()
