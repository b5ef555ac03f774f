"""
Schemas de Pydantic para el collector y el feed personal.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.models.feed_item import ActivityType
from app.schemas.user_profile import UserProfile


# Snapshot canónico de producto
class ProductImage(BaseModel):
    url: str
    alt_text: Optional[str] = None


class ProductPrice(BaseModel):
    amount: str = "0.00"
    currency_code: str = "USD"


class ShopRef(BaseModel):
    id: str
    name: Optional[str] = None


class ProductSnapshot(BaseModel):
    """Forma normalizada de un producto, independiente de la fuente"""
    id: str
    title: str
    description: Optional[str] = None
    price: Optional[ProductPrice] = None
    images: List[ProductImage] = Field(..., min_length=1)
    shop: Optional[ShopRef] = None


# Collector
class IngestRequest(BaseModel):
    """Lote de registros crudos de catálogo para el feed del viewer"""
    activity_type: ActivityType
    source: str = Field(..., min_length=1, max_length=100, description="Tag libre de procedencia")
    items: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "activity_type": "saved",
                "source": "saved_products",
                "items": [{"id": "gid://shopify/Product/123", "title": "Zapatillas"}]
            }
        }
    }


class IngestResult(BaseModel):
    """Resultado de un lote: el éxito parcial es normal"""
    user_id: str
    stored: int = 0
    skipped: int = 0
    failed: int = 0
    product_ids: List[str] = Field(default_factory=list)
    ignored_identity: bool = False


# Feed
class FeedItem(BaseModel):
    id: int
    user_id: str
    product_id: str
    product_snapshot: Dict[str, Any]
    activity_type: ActivityType
    source: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class FeedPage(BaseModel):
    items: List[FeedItem]
    limit: int
    offset: int
    has_more: bool


class FriendCard(BaseModel):
    """Tarjeta del Friends Feed: perfil + recuento + muestra aleatoria"""
    profile: UserProfile
    feed_item_count: int
    sample_item: Optional[FeedItem] = None
