"""
Dependencias centrales para la aplicación.

La autenticación queda fuera de este servicio: el gateway de delante
entrega un identificador de usuario estable en los headers.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.viewer import Viewer, derive_user_id
from app.db.session import get_db
from app.services.user_directory import user_directory

logger = logging.getLogger(__name__)


async def get_viewer(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_display_name: Optional[str] = Header(None, alias="X-Display-Name"),
    x_avatar_url: Optional[str] = Header(None, alias="X-Avatar-Url"),
) -> Viewer:
    """
    Obtiene el Viewer de la petición.

    X-User-Id tiene prioridad; si falta, se deriva del X-Display-Name.
    """
    if x_user_id and x_user_id.strip():
        user_id = x_user_id.strip()
        display_name = (x_display_name or user_id).strip()
        return Viewer(user_id=user_id, display_name=display_name, avatar_url=x_avatar_url)

    if x_display_name and x_display_name.strip():
        return Viewer(
            user_id=derive_user_id(x_display_name),
            display_name=x_display_name.strip(),
            avatar_url=x_avatar_url,
        )

    logger.warning("Petición sin identidad (faltan X-User-Id / X-Display-Name)")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Se requiere el header X-User-Id o X-Display-Name"
    )


async def get_registered_viewer(
    viewer: Viewer = Depends(get_viewer),
    db: Session = Depends(get_db),
) -> Viewer:
    """
    Viewer con perfil garantizado en el directorio (primer avistamiento).
    """
    user_directory.ensure_profile(db, viewer)
    return viewer
