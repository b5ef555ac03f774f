"""
Endpoints de items compartidos y votos.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.responses import raise_for_outcome
from app.core.deps import get_registered_viewer, get_viewer
from app.core.viewer import Viewer
from app.db.session import get_db
from app.schemas.shared_item import (
    ShareCreate,
    ShareFromFeed,
    SharedItem,
    SharedItemsPage,
    VoteCreate,
    VoteResult,
    VoteTally,
)
from app.services.share_vote_ledger import share_vote_ledger

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SharedItem, status_code=status.HTTP_201_CREATED)
async def share_product(
    payload: ShareCreate,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_registered_viewer),
):
    """
    Comparte un producto del catálogo con los seguidores.

    409 si el viewer ya tiene un share activo del mismo producto.
    """
    result = share_vote_ledger.share(db, viewer.user_id, payload.product, payload.message)
    raise_for_outcome(result)
    return result.value


@router.post("/from-feed/{product_id:path}", response_model=SharedItem, status_code=status.HTTP_201_CREATED)
async def share_feed_item(
    product_id: str,
    payload: Optional[ShareFromFeed] = None,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_registered_viewer),
):
    message = payload.message if payload else None
    result = share_vote_ledger.share_feed_item(db, viewer.user_id, product_id, message)
    raise_for_outcome(result)
    return result.value


@router.get("", response_model=SharedItemsPage)
async def list_shared_items(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """Shares propios y de los usuarios seguidos, más recientes primero."""
    return share_vote_ledger.list_visible(db, viewer.user_id, limit=limit, offset=offset)


@router.post("/{shared_item_id}/vote", response_model=VoteResult)
async def vote_shared_item(
    shared_item_id: str,
    payload: VoteCreate,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_registered_viewer),
):
    """
    Toggle de voto. Repetir el mismo voto lo retira; votar lo contrario lo cambia.
    """
    result = share_vote_ledger.vote(db, shared_item_id, viewer.user_id, payload.vote_type)
    raise_for_outcome(result)
    return result.value


@router.get("/{shared_item_id}/tally", response_model=VoteTally)
async def get_tally(
    shared_item_id: str,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    return share_vote_ledger.tally(db, shared_item_id, viewer_id=viewer.user_id)


@router.delete("/{shared_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unshare_item(
    shared_item_id: str,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """Retira un share propio. Los votos se conservan."""
    raise_for_outcome(share_vote_ledger.unshare(db, shared_item_id, viewer.user_id))
