"""
Schemas for bulk catalog operations: operation kinds, progress snapshots,
per-record results and the typed row records consumed by the handlers.
"""
import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from app.models.catalog import ProductStatus


class BulkOperationKind(str, Enum):
    IMPORT = "IMPORT"
    STATUS_UPDATE = "STATUS_UPDATE"
    CATEGORY_ASSIGNMENT = "CATEGORY_ASSIGNMENT"
    PRICE_UPDATE = "PRICE_UPDATE"
    VARIANT_CREATION = "VARIANT_CREATION"

    @classmethod
    def parse(cls, value: str) -> "BulkOperationKind":
        """Accept both `price_update` and `PRICE_UPDATE`."""
        return cls(value.strip().upper())


class OperationStatus(str, Enum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ExportKind(str, Enum):
    ALL = "all"
    VARIANTS = "variants"


# ==================== Results & snapshots ====================

class RecordResult(BaseModel):
    """Resultado de una fila del archivo"""
    success: bool
    identifier: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, identifier: Any) -> "RecordResult":
        return cls(success=True, identifier=_as_identifier(identifier))

    @classmethod
    def failure(cls, identifier: Any, error: str) -> "RecordResult":
        return cls(success=False, identifier=_as_identifier(identifier), error=error)


def _as_identifier(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


class OperationSnapshot(BaseModel):
    """Estado de una operación tal como se guarda en el progress store"""
    status: OperationStatus
    processed: int = 0
    total: int = 0
    results: Optional[List[RecordResult]] = None
    error: Optional[str] = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

    @classmethod
    def from_json(cls, raw: str) -> "OperationSnapshot":
        return cls.model_validate_json(raw)


class BulkOperationResponse(BaseModel):
    """Respuesta al encolar una operación masiva"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    operation_id: str = Field(..., serialization_alias="operationId")
    message: str


class VariantBulkDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    variant_ids: List[Any] = Field(..., alias="variantIds")


class BulkOperationLogResponse(BaseModel):
    """Entrada del histórico de operaciones masivas"""
    model_config = ConfigDict(from_attributes=True)

    operation_id: str
    kind: str
    status: str
    total: int
    processed: int
    failed_count: int
    error_message: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


# ==================== Typed row records ====================

class RowRecord(BaseModel):
    """
    Base for a CSV row converted to a typed record.

    Column names are the camelCase headers used by the export; blank cells
    are treated as missing values.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_cells(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if not (value is None or (isinstance(value, str) and not value.strip()))
            }
        return data


def _finite_decimal(value: Optional[Decimal], field: str) -> Optional[Decimal]:
    if value is not None and not value.is_finite():
        raise ValueError(f"{field} must be a finite number")
    return value


def _parse_json_cell(value: Any, field: str) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{field} is not valid JSON: {exc.msg}") from exc
    return value


class ImportRecord(RowRecord):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    stock: int
    status: ProductStatus = ProductStatus.DRAFT
    category_id: Optional[int] = Field(None, alias="categoryId")
    sku: Optional[str] = None
    barcode: Optional[str] = None
    weight: Optional[Decimal] = None
    dimensions: Optional[Dict[str, Any]] = None
    is_bundle: bool = Field(False, alias="isBundle")
    bundle_discount: Optional[Decimal] = Field(None, alias="bundleDiscount")

    @field_validator("price", "weight", "bundle_discount")
    @classmethod
    def _check_finite(cls, value, info):
        return _finite_decimal(value, info.field_name)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        if value is None:
            return ProductStatus.DRAFT
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("dimensions", mode="before")
    @classmethod
    def _decode_dimensions(cls, value):
        return _parse_json_cell(value, "dimensions")

    @field_validator("is_bundle", mode="before")
    @classmethod
    def _bundle_flag(cls, value):
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return value


class StatusUpdateRecord(RowRecord):
    id: int
    status: ProductStatus

    @field_validator("status", mode="before")
    @classmethod
    def _upper(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class CategoryAssignmentRecord(RowRecord):
    id: int
    category_id: int = Field(..., alias="categoryId")


class PriceUpdateRecord(RowRecord):
    id: int
    price: Decimal = Field(..., ge=0)

    @field_validator("price")
    @classmethod
    def _check_finite(cls, value):
        return _finite_decimal(value, "price")


class VariantCreationRecord(RowRecord):
    product_id: int = Field(..., alias="productId")
    name: Optional[str] = None
    sku: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    stock: int = 0
    options: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("options", "attributes"),
    )
    inventory_tracking: bool = Field(True, alias="inventoryTracking")
    low_stock_threshold: int = Field(5, alias="lowStockThreshold")

    @field_validator("price")
    @classmethod
    def _check_finite(cls, value):
        return _finite_decimal(value, "price")

    @field_validator("options", mode="before")
    @classmethod
    def _decode_options(cls, value):
        if value is None:
            return {}
        return _parse_json_cell(value, "options")

    @field_validator("inventory_tracking", mode="before")
    @classmethod
    def _tracking_flag(cls, value):
        # Only an explicit "false" turns tracking off
        if value is None:
            return True
        if isinstance(value, str):
            return value.strip().lower() != "false"
        return value

    @field_validator("low_stock_threshold", mode="before")
    @classmethod
    def _default_threshold(cls, value):
        return 5 if value is None else value
