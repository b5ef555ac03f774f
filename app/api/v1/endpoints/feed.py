"""
Endpoints del feed personal y del Friends Feed.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.responses import raise_for_outcome
from app.core.deps import get_viewer
from app.core.outcomes import Outcome, OperationResult
from app.core.viewer import Viewer
from app.db.session import get_db
from app.schemas.feed_item import FeedItem, FeedPage, FriendCard
from app.services.feed_curator import feed_curator
from app.services.friends_feed import friends_feed
from app.services.social_graph import social_graph

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=FeedPage)
async def get_my_feed(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """
    Feed propio ordenado: shared > saved > liked > recommended > browsed,
    y dentro de cada tipo el más reciente primero.
    """
    return feed_curator.get_feed_page(db, viewer.user_id, limit=limit, offset=offset)


@router.delete("/me/items/{product_id:path}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_feed_item(
    product_id: str,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """Retira un item del feed propio (reversible volviendo a recolectarlo)."""
    raise_for_outcome(feed_curator.remove_from_feed(db, viewer.user_id, product_id))


@router.get("/friends", response_model=List[FriendCard])
async def get_friends_feed(
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    return friends_feed.get_cards(db, viewer.user_id)


@router.get("/users/{user_id}", response_model=FeedPage)
async def get_user_feed(
    user_id: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """Feed de otro usuario; requiere seguirlo."""
    result = feed_curator.get_feed_for_viewer(db, viewer.user_id, user_id, limit=limit, offset=offset)
    raise_for_outcome(result)
    return result.value


@router.get("/users/{user_id}/sample", response_model=Optional[FeedItem])
async def get_user_feed_sample(
    user_id: str,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """
    Un item al azar entre los más recientes, para miniaturas de vista previa.
    Devuelve null si el usuario no tiene items.
    """
    if not social_graph.can_view(db, viewer.user_id, user_id):
        raise_for_outcome(
            OperationResult.failure(Outcome.FORBIDDEN, "Debes seguir a este usuario para ver su feed")
        )
    return feed_curator.get_sample(db, user_id)
