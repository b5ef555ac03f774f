"""
Endpoints del grafo social: solicitudes, seguidores y descubrimiento.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.responses import raise_for_outcome
from app.core.deps import get_registered_viewer, get_viewer
from app.core.viewer import Viewer
from app.db.session import get_db
from app.schemas.follow import (
    FollowDecision,
    FollowListResponse,
    FollowRequest,
    FollowRequestCreate,
    ReconcileResult,
)
from app.schemas.user_profile import UserProfile
from app.services.social_graph import social_graph

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== SOLICITUDES ====================

@router.post("/requests", response_model=FollowRequest, status_code=status.HTTP_201_CREATED)
async def send_follow_request(
    payload: FollowRequestCreate,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_registered_viewer),
):
    """
    Envía una solicitud de seguimiento.

    409 si ya existe una pendiente para el par o si ya lo sigue.
    """
    result = social_graph.send_request(db, viewer.user_id, payload.recipient_id, payload.message)
    raise_for_outcome(result)
    return result.value


@router.get("/requests/pending", response_model=List[FollowRequest])
async def list_pending_requests(
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    return social_graph.list_pending_requests(db, viewer.user_id)


@router.post("/requests/{request_id}/accept", response_model=FollowRequest)
async def accept_follow_request(
    request_id: int,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    result = social_graph.respond(db, request_id, FollowDecision.ACCEPT, responder_id=viewer.user_id)
    raise_for_outcome(result)
    return result.value


@router.post("/requests/{request_id}/decline", response_model=FollowRequest)
async def decline_follow_request(
    request_id: int,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    result = social_graph.respond(db, request_id, FollowDecision.DECLINE, responder_id=viewer.user_id)
    raise_for_outcome(result)
    return result.value


# ==================== SEGUIMIENTO ====================

@router.post("/following/{target_id}", status_code=status.HTTP_204_NO_CONTENT)
async def follow_user(
    target_id: str,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_registered_viewer),
):
    """Seguimiento directo desde la búsqueda."""
    raise_for_outcome(social_graph.follow(db, viewer.user_id, target_id))


@router.delete("/following/{target_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_user(
    target_id: str,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    raise_for_outcome(social_graph.unfollow(db, viewer.user_id, target_id))


@router.get("/followers", response_model=FollowListResponse)
async def list_followers(
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    users = social_graph.list_followers(db, viewer.user_id)
    return FollowListResponse(users=users, total=len(users))


@router.get("/following", response_model=FollowListResponse)
async def list_following(
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    users = social_graph.list_following(db, viewer.user_id)
    return FollowListResponse(users=users, total=len(users))


@router.get("/discover", response_model=List[UserProfile])
async def discover_users(
    q: Optional[str] = Query(None, description="Filtro por nombre o handle"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """
    Usuarios que el viewer aún no sigue ni tiene solicitados.
    """
    return social_graph.list_discoverable(db, viewer.user_id, query=q, skip=offset, limit=limit)


@router.post("/reconcile", response_model=ReconcileResult)
async def reconcile_follow_edges(
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """Repara aristas faltantes de solicitudes aceptadas del viewer."""
    return ReconcileResult(repaired=social_graph.reconcile(db, user_id=viewer.user_id))
