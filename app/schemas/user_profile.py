from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.core.config import get_settings


class UserProfile(BaseModel):
    """Schema de respuesta para un perfil del directorio"""
    user_id: str
    handle: str
    display_name: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    last_active: datetime

    model_config = {"from_attributes": True}


class UserProfileUpdate(BaseModel):
    """Schema para actualizar el perfil propio"""
    bio: Optional[str] = Field(None, max_length=get_settings().BIO_MAX_LENGTH)
