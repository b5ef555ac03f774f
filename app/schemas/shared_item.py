"""
Schemas de Pydantic para shares y votos.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.config import get_settings
from app.models.shared_item import VoteType
from app.schemas.user_profile import UserProfile

_MESSAGE_MAX = get_settings().SHARE_MESSAGE_MAX_LENGTH


class ShareCreate(BaseModel):
    """Schema para promover un producto arbitrario del catálogo"""
    product: Dict[str, Any]
    message: Optional[str] = Field(None, max_length=_MESSAGE_MAX)


class ShareFromFeed(BaseModel):
    """Schema para promover un item del feed propio"""
    message: Optional[str] = Field(None, max_length=_MESSAGE_MAX)


class SharedItem(BaseModel):
    id: str
    user_id: str
    product_id: str
    product_snapshot: Dict[str, Any]
    share_message: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class VoteCreate(BaseModel):
    vote_type: VoteType


class VoteTally(BaseModel):
    """Recuento recalculado desde las filas de votos"""
    shared_item_id: str
    like_count: int = 0
    dislike_count: int = 0
    viewer_vote: Optional[VoteType] = None


class VoteResult(BaseModel):
    action: str = Field(..., description="'voted', 'unvoted' o 'switched'")
    tally: VoteTally


class SharedItemView(BaseModel):
    """Item compartido tal como lo ve un viewer"""
    item: SharedItem
    owner: Optional[UserProfile] = None
    tally: VoteTally


class SharedItemsPage(BaseModel):
    items: List[SharedItemView]
    limit: int
    offset: int
    has_more: bool
