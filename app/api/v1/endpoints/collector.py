"""
Endpoints del Event Collector.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.deps import get_viewer
from app.core.viewer import Viewer
from app.db.session import get_db
from app.schemas.feed_item import IngestRequest, IngestResult
from app.services.event_collector import event_collector

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/ingest", response_model=IngestResult, status_code=status.HTTP_200_OK)
async def ingest_items(
    payload: IngestRequest,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    """
    Guarda un lote de registros del catálogo en el feed del viewer.

    El éxito parcial es normal: los registros sin product id se cuentan como
    `skipped` y los que no se pudieron guardar como `failed`.
    """
    return event_collector.ingest(
        db,
        viewer,
        payload.items,
        activity_type=payload.activity_type,
        source=payload.source,
    )
