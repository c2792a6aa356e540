"""
Catalog exporter: flattens products or variants into CSV.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.core.exceptions import UnsupportedOperationError
from app.models.catalog import Product, ProductVariant
from app.repositories.catalog_repository import CatalogRepository
from app.schemas.bulk_schemas import ExportKind
from app.services.bulk.tabular import serialize_rows

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = [
    "id",
    "name",
    "description",
    "price",
    "stock",
    "status",
    "categoryId",
    "categoryName",
    "sku",
    "barcode",
    "weight",
    "dimensions",
    "isBundle",
    "bundleDiscount",
    "createdAt",
    "updatedAt",
]

VARIANT_COLUMNS = [
    "id",
    "productId",
    "productName",
    "name",
    "sku",
    "price",
    "stock",
    "options",
    "inventoryTracking",
    "lowStockThreshold",
]

SUPPORTED_FORMATS = ("csv",)


@dataclass
class ExportFile:
    filename: str
    content: str
    media_type: str = "text/csv"


def to_cell(value: Any) -> str:
    """Scalar representation used in exported cells."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def flatten_product(product: Product) -> Dict[str, str]:
    row = {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "status": product.status,
        "categoryId": product.category_id,
        "categoryName": product.category.name if product.category else None,
        "sku": product.sku,
        "barcode": product.barcode,
        "weight": product.weight,
        "dimensions": product.dimensions,
        "isBundle": product.is_bundle,
        "bundleDiscount": product.bundle_discount,
        "createdAt": product.created_at,
        "updatedAt": product.updated_at,
    }
    return {key: to_cell(value) for key, value in row.items()}


def flatten_variant(variant: ProductVariant) -> Dict[str, str]:
    row = {
        "id": variant.id,
        "productId": variant.product_id,
        "productName": variant.product.name if variant.product else None,
        "name": variant.name,
        "sku": variant.sku,
        "price": variant.price,
        "stock": variant.stock,
        "options": variant.options or {},
        "inventoryTracking": variant.inventory_tracking,
        "lowStockThreshold": variant.low_stock_threshold,
    }
    return {key: to_cell(value) for key, value in row.items()}


def export_catalog(db: Session, kind: str, fmt: str = "csv") -> ExportFile:
    """
    Export `all` products or their `variants` as a CSV attachment.

    Raises:
        UnsupportedOperationError: unknown kind or format
    """
    try:
        export_kind = ExportKind(kind)
    except ValueError:
        raise UnsupportedOperationError(f"Invalid type: {kind}")
    if fmt not in SUPPORTED_FORMATS:
        raise UnsupportedOperationError(f"Invalid format: {fmt}")

    repo = CatalogRepository(db)
    if export_kind is ExportKind.ALL:
        columns = PRODUCT_COLUMNS
        rows: List[Dict[str, str]] = [flatten_product(p) for p in repo.list_products_for_export()]
    else:
        columns = VARIANT_COLUMNS
        rows = [flatten_variant(v) for v in repo.list_variants_for_export()]

    timestamp = datetime.utcnow().strftime("%Y-%m-%dT%H-%M-%SZ")
    logger.info(f"Exporting {len(rows)} rows ({export_kind.value})")
    return ExportFile(
        filename=f"products-{export_kind.value}-{timestamp}.csv",
        content=serialize_rows(columns, rows),
    )
