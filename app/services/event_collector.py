"""
Event Collector: normaliza registros crudos del catálogo a FeedItems.

La recolección es best-effort:
- Registros sin product id se descartan en silencio (solo log).
- Un fallo al guardar un item no aborta el lote; cada item va en su
  propia transacción.
- Upsert por (user_id, product_id): el mismo producto visto por dos fuentes
  colapsa en una fila y la última ingesta gana.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import CatalogValidationError, TransientStoreError
from app.core.viewer import Viewer
from app.db.session import store_transaction
from app.models.feed_item import ActivityType
from app.repositories.feed_item import feed_item_repository
from app.schemas.feed_item import IngestResult
from app.services.user_directory import user_directory
from app.utils.product_snapshot import build_product_snapshot, expand_catalog_records

logger = logging.getLogger(__name__)


# Activity type por defecto para las fuentes conocidas del catálogo
SOURCE_ACTIVITY_TYPES: Dict[str, ActivityType] = {
    "recommended_products": ActivityType.RECOMMENDED,
    "recommended_shops": ActivityType.RECOMMENDED,
    "followed_shops": ActivityType.RECOMMENDED,
    "product_lists": ActivityType.SAVED,
    "saved_products": ActivityType.SAVED,
    "liked_products": ActivityType.LIKED,
    "recently_viewed": ActivityType.BROWSED,
}


class EventCollector:

    def ingest(
        self,
        db: Session,
        viewer: Viewer,
        raw_items: Iterable[Any],
        activity_type: ActivityType,
        source: str,
    ) -> IngestResult:
        """
        Guarda un lote de registros de catálogo en el feed del viewer.

        Args:
            db: Sesión de base de datos
            viewer: Usuario dueño del feed
            raw_items: Registros opacos del catálogo
            activity_type: Motivo por el que los items llegan al feed
            source: Tag libre de procedencia

        Returns:
            IngestResult con los contadores del lote

        Raises:
            TransientStoreError: si no se pudo registrar el perfil del dueño
        """
        result = IngestResult(user_id=viewer.user_id)

        if viewer.is_ignored_identity():
            logger.info(f"🚫 Identidad de demo ignorada: {viewer.display_name}")
            result.ignored_identity = True
            return result

        source = (source or "").strip() or "unknown"

        # Primer avistamiento del usuario: el perfil debe existir antes que sus items
        user_directory.ensure_profile(db, viewer)

        for record in expand_catalog_records(raw_items):
            try:
                snapshot = build_product_snapshot(record)
            except CatalogValidationError as e:
                result.skipped += 1
                logger.debug(f"Registro descartado en {source}: {e}")
                continue

            product_id = snapshot["id"]
            try:
                with store_transaction(db, "ingest_feed_item"):
                    feed_item_repository.upsert(
                        db,
                        user_id=viewer.user_id,
                        product_id=product_id,
                        product_snapshot=snapshot,
                        activity_type=activity_type,
                        source=source,
                        created_at=datetime.now(timezone.utc),
                    )
            except (TransientStoreError, IntegrityError) as e:
                result.failed += 1
                logger.warning(f"No se pudo guardar {product_id} para {viewer.user_id}: {e}")
                continue

            result.stored += 1
            if product_id not in result.product_ids:
                result.product_ids.append(product_id)

        if result.stored:
            try:
                user_directory.touch(db, viewer)
            except TransientStoreError as e:
                logger.warning(f"No se pudo refrescar el perfil de {viewer.user_id}: {e}")

        logger.info(
            f"Ingesta {source} para {viewer.user_id}: "
            f"{result.stored} guardados, {result.skipped} descartados, {result.failed} fallidos"
        )
        return result

    def collect_sources(
        self,
        db: Session,
        viewer: Viewer,
        batches: Mapping[str, Iterable[Any]],
        activity_overrides: Optional[Mapping[str, ActivityType]] = None,
    ) -> Dict[str, IngestResult]:
        """
        Ingesta varias fuentes de una vez, cada una con su activity type por defecto.

        Fuentes desconocidas se registran como BROWSED salvo override.
        """
        overrides = activity_overrides or {}
        results: Dict[str, IngestResult] = {}
        for source, records in batches.items():
            activity_type = overrides.get(source) or SOURCE_ACTIVITY_TYPES.get(source, ActivityType.BROWSED)
            results[source] = self.ingest(db, viewer, records, activity_type, source)
        return results


event_collector = EventCollector()
