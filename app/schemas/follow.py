from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.config import get_settings
from app.models.follow import FollowRequestStatus
from app.schemas.user_profile import UserProfile


class FollowDecision(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


# Para crear solicitudes
class FollowRequestCreate(BaseModel):
    recipient_id: str = Field(..., min_length=1)
    message: Optional[str] = Field(None, max_length=get_settings().FOLLOW_REQUEST_MESSAGE_MAX_LENGTH)


# Para respuestas de API
class FollowRequest(BaseModel):
    id: int
    requester_id: str
    recipient_id: str
    status: FollowRequestStatus
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    requester: Optional[UserProfile] = None

    model_config = {"from_attributes": True}


class FollowEntry(BaseModel):
    """Un seguidor o seguido con la fecha de la arista"""
    profile: UserProfile
    followed_at: datetime


class FollowListResponse(BaseModel):
    users: List[FollowEntry]
    total: int


class ReconcileResult(BaseModel):
    repaired: int
