"""
Normalización de registros crudos del catálogo a un snapshot canónico.

Los catálogos devuelven registros parciales y con formas distintas según la
fuente. Aquí se prueban listas fijas de campos por prioridad y se garantiza
que todo snapshot tenga al menos una imagen renderizable.
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from app.core.config import get_settings
from app.core.exceptions import CatalogValidationError
from app.schemas.feed_item import ProductImage, ProductPrice, ProductSnapshot, ShopRef

PRODUCT_ID_FIELDS = ("id", "product_id", "productId")
PRICE_FIELDS = (
    ("price",),
    ("priceRange", "minVariantPrice"),
    ("minPrice",),
)
SINGLE_IMAGE_FIELDS = ("featuredImage", "image")


def _dig(record: Mapping[str, Any], path: Iterable[str]) -> Any:
    current: Any = record
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _clean_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def extract_product_id(record: Any) -> Optional[str]:
    """Primer identificador de producto no vacío, o None."""
    if not isinstance(record, Mapping):
        return None
    for field in PRODUCT_ID_FIELDS:
        product_id = _clean_str(record.get(field))
        if product_id:
            return product_id
    return None


def placeholder_image_url(product_id: str) -> str:
    return get_settings().PLACEHOLDER_IMAGE_URL.format(product_id=product_id)


def _image_from(entry: Any, default_alt: str) -> Optional[ProductImage]:
    if isinstance(entry, str):
        url = _clean_str(entry)
        return ProductImage(url=url, alt_text=default_alt) if url else None
    if not isinstance(entry, Mapping):
        return None
    url = _clean_str(entry.get("url")) or _clean_str(entry.get("src"))
    if not url:
        return None
    alt = _clean_str(entry.get("altText")) or _clean_str(entry.get("alt")) or default_alt
    return ProductImage(url=url, alt_text=alt)


def resolve_images(record: Mapping[str, Any], product_id: str, title: str) -> List[ProductImage]:
    """
    images[] -> featuredImage -> image -> placeholder determinista por product id.
    """
    raw_images = record.get("images")
    if isinstance(raw_images, list):
        images = [img for img in (_image_from(entry, title) for entry in raw_images) if img]
        if images:
            return images

    for field in SINGLE_IMAGE_FIELDS:
        image = _image_from(record.get(field), title)
        if image:
            return [image]

    return [ProductImage(url=placeholder_image_url(product_id), alt_text=title or "Product Image")]


def resolve_price(record: Mapping[str, Any]) -> Optional[ProductPrice]:
    for path in PRICE_FIELDS:
        value = _dig(record, path)
        if value is None:
            continue
        if isinstance(value, Mapping):
            amount = _clean_str(value.get("amount")) or "0.00"
            currency = (
                _clean_str(value.get("currencyCode"))
                or _clean_str(value.get("currency_code"))
                or "USD"
            )
            return ProductPrice(amount=amount, currency_code=currency)
        amount = _clean_str(value)
        if amount:
            return ProductPrice(amount=amount)
    return None


def resolve_shop(record: Mapping[str, Any]) -> Optional[ShopRef]:
    shop = record.get("shop")
    if not isinstance(shop, Mapping):
        return None
    shop_id = _clean_str(shop.get("id"))
    if not shop_id:
        return None
    return ShopRef(id=shop_id, name=_clean_str(shop.get("name")))


def build_product_snapshot(record: Any) -> Dict[str, Any]:
    """
    Construye el snapshot canónico de un registro de catálogo.

    Raises:
        CatalogValidationError: si el registro no tiene product id
    """
    product_id = extract_product_id(record)
    if not product_id:
        raise CatalogValidationError("Registro de catálogo sin product id")

    title = _clean_str(record.get("title")) or f"Product {product_id}"
    snapshot = ProductSnapshot(
        id=product_id,
        title=title,
        description=_clean_str(record.get("description")),
        price=resolve_price(record),
        images=resolve_images(record, product_id, title),
        shop=resolve_shop(record),
    )
    return snapshot.model_dump(mode="json")


def expand_catalog_records(records: Iterable[Any]) -> Iterator[Any]:
    """
    Aplana registros tipo tienda: si traen una lista `products` se emiten sus
    productos; si no, el registro mismo se trata como item.
    """
    for record in records or []:
        if isinstance(record, Mapping) and isinstance(record.get("products"), list):
            yield from record["products"]
        else:
            yield record
