import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Estado del servicio y conectividad con la base de datos."""
    settings = get_settings()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check: base de datos no disponible: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": "unavailable", "version": settings.VERSION},
        )
    return {"status": "ok", "database": "ok", "version": settings.VERSION}
