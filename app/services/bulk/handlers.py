"""
Record handlers: one per bulk operation kind.

A handler converts one raw CSV row into its typed record, applies the
mutation through the catalog repository and returns a RecordResult.
Conversion errors and missing referenced entities come back as failed
results. Errors raised by the store on flush (constraint violations)
propagate so the batch executor can roll back the row's savepoint.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Optional, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from app.repositories.catalog_repository import CatalogRepository
from app.schemas.bulk_schemas import (
    BulkOperationKind,
    CategoryAssignmentRecord,
    ImportRecord,
    PriceUpdateRecord,
    RecordResult,
    StatusUpdateRecord,
    VariantCreationRecord,
)
from app.utils.text_helpers import slugify

logger = logging.getLogger(__name__)


def format_validation_error(exc: ValidationError) -> str:
    """`price: Input should be a valid decimal; stock: Field required`"""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "row"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


class RecordHandler(ABC):
    """Base class for the per-kind handlers."""

    kind: ClassVar[BulkOperationKind]
    record_model: ClassVar[Type[BaseModel]]
    reference_fields: ClassVar[tuple] = ("id",)

    def handle(self, db: Session, row: Dict[str, Any]) -> RecordResult:
        try:
            record = self.record_model.model_validate(row)
        except ValidationError as e:
            return RecordResult.failure(self.reference(row), format_validation_error(e))
        return self.apply(CatalogRepository(db), record)

    @abstractmethod
    def apply(self, repo: CatalogRepository, record: Any) -> RecordResult:
        ...

    def reference(self, row: Dict[str, Any]) -> Optional[str]:
        """Identifier of a row before it is converted (for failed results)."""
        for field in self.reference_fields:
            value = row.get(field)
            if value not in (None, ""):
                return str(value).strip()
        return None


class ImportHandler(RecordHandler):
    kind = BulkOperationKind.IMPORT
    record_model = ImportRecord
    reference_fields = ("name", "sku")

    def apply(self, repo: CatalogRepository, record: ImportRecord) -> RecordResult:
        slug = slugify(record.name)
        if not slug:
            return RecordResult.failure(record.name, "Cannot derive a slug from name")

        if record.category_id is not None and repo.get_category(record.category_id) is None:
            return RecordResult.failure(
                record.name, f"Category {record.category_id} not found"
            )

        product = repo.create_product(
            name=record.name,
            slug=slug,
            description=record.description,
            price=record.price,
            stock=record.stock,
            status=record.status,
            category_id=record.category_id,
            sku=record.sku,
            barcode=record.barcode,
            weight=record.weight,
            dimensions=record.dimensions,
            is_bundle=record.is_bundle,
            bundle_discount=record.bundle_discount,
        )
        return RecordResult.ok(product.id)


class StatusUpdateHandler(RecordHandler):
    kind = BulkOperationKind.STATUS_UPDATE
    record_model = StatusUpdateRecord

    def apply(self, repo: CatalogRepository, record: StatusUpdateRecord) -> RecordResult:
        product = repo.get_product(record.id)
        if product is None:
            return RecordResult.failure(record.id, f"Product {record.id} not found")
        repo.set_status(product, record.status)
        return RecordResult.ok(product.id)


class CategoryAssignmentHandler(RecordHandler):
    kind = BulkOperationKind.CATEGORY_ASSIGNMENT
    record_model = CategoryAssignmentRecord

    def apply(self, repo: CatalogRepository, record: CategoryAssignmentRecord) -> RecordResult:
        product = repo.get_product(record.id)
        if product is None:
            return RecordResult.failure(record.id, f"Product {record.id} not found")
        category = repo.get_category(record.category_id)
        if category is None:
            return RecordResult.failure(
                record.id, f"Category {record.category_id} not found"
            )
        repo.set_category(product, category)
        return RecordResult.ok(product.id)


class PriceUpdateHandler(RecordHandler):
    kind = BulkOperationKind.PRICE_UPDATE
    record_model = PriceUpdateRecord

    def apply(self, repo: CatalogRepository, record: PriceUpdateRecord) -> RecordResult:
        product = repo.get_product(record.id)
        if product is None:
            return RecordResult.failure(record.id, f"Product {record.id} not found")
        repo.set_price(product, record.price)
        return RecordResult.ok(product.id)


class VariantCreationHandler(RecordHandler):
    kind = BulkOperationKind.VARIANT_CREATION
    record_model = VariantCreationRecord
    reference_fields = ("sku", "name", "productId")

    def apply(self, repo: CatalogRepository, record: VariantCreationRecord) -> RecordResult:
        product = repo.get_product(record.product_id)
        if product is None:
            return RecordResult.failure(
                record.sku or record.product_id,
                f"Parent product {record.product_id} not found"
            )
        variant = repo.create_variant(
            product,
            name=record.name,
            sku=record.sku,
            price=record.price,
            stock=record.stock,
            options=record.options,
            inventory_tracking=record.inventory_tracking,
            low_stock_threshold=record.low_stock_threshold,
        )
        return RecordResult.ok(variant.id)


HANDLERS: Dict[BulkOperationKind, RecordHandler] = {
    handler.kind: handler
    for handler in (
        ImportHandler(),
        StatusUpdateHandler(),
        CategoryAssignmentHandler(),
        PriceUpdateHandler(),
        VariantCreationHandler(),
    )
}


def get_handler(kind: BulkOperationKind) -> RecordHandler:
    return HANDLERS[kind]
