"""
Conversión de filas CSV a registros tipados
"""
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.models.catalog import ProductStatus
from app.schemas.bulk_schemas import (
    BulkOperationKind,
    CategoryAssignmentRecord,
    ImportRecord,
    OperationSnapshot,
    OperationStatus,
    PriceUpdateRecord,
    RecordResult,
    StatusUpdateRecord,
    VariantCreationRecord,
)


def test_import_record_defaults():
    record = ImportRecord.model_validate({"name": "Trail Boot", "price": "89.90", "stock": "4"})

    assert record.price == Decimal("89.90")
    assert record.stock == 4
    assert record.status is ProductStatus.DRAFT
    assert record.category_id is None
    assert record.is_bundle is False
    assert record.dimensions is None


def test_import_record_blank_cells_are_missing():
    record = ImportRecord.model_validate({
        "name": "Trail Boot",
        "price": "10",
        "stock": "1",
        "status": "",
        "categoryId": "  ",
        "weight": "",
    })

    assert record.status is ProductStatus.DRAFT
    assert record.category_id is None
    assert record.weight is None


def test_import_record_full_row():
    record = ImportRecord.model_validate({
        "name": " Bundle ",
        "description": "Two pairs",
        "price": "120.00",
        "stock": "2",
        "status": "active",
        "categoryId": "3",
        "sku": "BND-1",
        "barcode": "123",
        "weight": "1.250",
        "dimensions": '{"width": 10, "height": 5}',
        "isBundle": "TRUE",
        "bundleDiscount": "15",
        "unknownColumn": "ignored",
    })

    assert record.name == "Bundle"
    assert record.status is ProductStatus.ACTIVE
    assert record.category_id == 3
    assert record.dimensions == {"width": 10, "height": 5}
    assert record.is_bundle is True
    assert record.bundle_discount == Decimal("15")


def test_import_record_bundle_flag_only_true_literal():
    record = ImportRecord.model_validate(
        {"name": "A", "price": "1", "stock": "1", "isBundle": "yes"}
    )
    assert record.is_bundle is False


@pytest.mark.parametrize("row", [
    {"price": "1", "stock": "1"},
    {"name": "A", "price": "-1", "stock": "1"},
    {"name": "A", "price": "abc", "stock": "1"},
    {"name": "A", "price": "1", "stock": "1.5"},
    {"name": "A", "price": "1", "stock": "1", "status": "SOLD"},
    {"name": "A", "price": "1", "stock": "1", "dimensions": "{not json"},
])
def test_import_record_rejects_invalid_rows(row):
    with pytest.raises(ValidationError):
        ImportRecord.model_validate(row)


def test_status_update_record_is_case_insensitive():
    record = StatusUpdateRecord.model_validate({"id": "9", "status": "archived"})

    assert record.id == 9
    assert record.status is ProductStatus.ARCHIVED


def test_category_assignment_requires_category():
    with pytest.raises(ValidationError):
        CategoryAssignmentRecord.model_validate({"id": "1", "categoryId": ""})


def test_price_update_record():
    record = PriceUpdateRecord.model_validate({"id": "4", "price": "19.99"})
    assert record.price == Decimal("19.99")

    with pytest.raises(ValidationError):
        PriceUpdateRecord.model_validate({"id": "x", "price": "19.99"})


def test_variant_record_defaults():
    record = VariantCreationRecord.model_validate({"productId": "1", "price": "5", "stock": ""})

    assert record.product_id == 1
    assert record.stock == 0
    assert record.options == {}
    assert record.inventory_tracking is True
    assert record.low_stock_threshold == 5


def test_variant_record_inventory_tracking_off_only_with_false():
    off = VariantCreationRecord.model_validate(
        {"productId": "1", "price": "5", "inventoryTracking": "FALSE"}
    )
    on = VariantCreationRecord.model_validate(
        {"productId": "1", "price": "5", "inventoryTracking": "no"}
    )

    assert off.inventory_tracking is False
    assert on.inventory_tracking is True


def test_variant_record_accepts_attributes_column():
    record = VariantCreationRecord.model_validate({
        "productId": "1",
        "price": "5",
        "attributes": '{"size": "42"}',
        "lowStockThreshold": "2",
    })

    assert record.options == {"size": "42"}
    assert record.low_stock_threshold == 2


def test_operation_kind_parse():
    assert BulkOperationKind.parse(" price_update ") is BulkOperationKind.PRICE_UPDATE
    with pytest.raises(ValueError):
        BulkOperationKind.parse("DELETE")


def test_record_result_identifier_is_text():
    assert RecordResult.ok(5).identifier == "5"
    assert RecordResult.failure(None, "boom").identifier is None


def test_snapshot_json_omits_unset_fields():
    snapshot = OperationSnapshot(status=OperationStatus.PROCESSING, processed=0, total=3)

    assert snapshot.to_json() == '{"status":"PROCESSING","processed":0,"total":3}'
    assert OperationSnapshot.from_json(snapshot.to_json()) == snapshot
