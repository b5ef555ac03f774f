import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.responses import raise_for_outcome
from app.core.deps import get_registered_viewer
from app.core.viewer import Viewer
from app.db.session import get_db
from app.schemas.user_profile import UserProfile, UserProfileUpdate
from app.services.user_directory import user_directory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def read_my_profile(
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_registered_viewer),
):
    return user_directory.get_profile(db, viewer.user_id)


@router.patch("/me", response_model=UserProfile)
async def update_my_profile(
    payload: UserProfileUpdate,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_registered_viewer),
):
    result = user_directory.update_bio(db, viewer.user_id, payload.bio)
    raise_for_outcome(result)
    return result.value


@router.get("/{user_id}", response_model=UserProfile)
async def read_profile(
    user_id: str,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_registered_viewer),
):
    profile = user_directory.get_profile(db, user_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Perfil no encontrado"
        )
    return profile
