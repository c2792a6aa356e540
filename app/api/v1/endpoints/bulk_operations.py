"""
Bulk catalog operation endpoints: upload + dispatch, progress polling,
CSV export and batched variant deletion.
"""
import json
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_admin
from app.core.config import settings
from app.core.exceptions import ProgressStoreUnavailable, TabularParseError, UnsupportedOperationError
from app.db.session import get_db
from app.models.user_model import User
from app.repositories.catalog_repository import CatalogRepository
from app.schemas.bulk_schemas import BulkOperationKind, BulkOperationResponse, VariantBulkDeleteRequest
from app.services.bulk.dispatcher import dispatch_bulk_operation
from app.services.bulk.executor import chunked
from app.services.bulk.exporter import export_catalog
from app.services.progress_store import ProgressStore, get_progress_store, read_snapshot
from app.tasks.bulk_tasks import enqueue_bulk_operation

logger = logging.getLogger(__name__)

router = APIRouter()


def get_enqueuer():
    return enqueue_bulk_operation


@router.post("/products/bulk", response_model=BulkOperationResponse)
def submit_bulk_operation(
    file: Optional[UploadFile] = File(None),
    operation: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    progress_store: ProgressStore = Depends(get_progress_store),
    enqueue=Depends(get_enqueuer),
    current_user: User = Depends(get_current_admin)
):
    """
    Start a bulk operation from a CSV upload.

    The rows are processed in the background; poll
    `/products/bulk/operations/{operationId}` for progress.
    """
    if file is None or not operation:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    try:
        kind = BulkOperationKind.parse(operation)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid operation")

    content = file.file.read()
    try:
        dispatched = dispatch_bulk_operation(
            kind,
            content,
            progress_store=progress_store,
            enqueue=enqueue,
            db=db,
            user_id=current_user.id,
        )
    except TabularParseError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"[BULK_PRODUCTS_POST] {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")

    return BulkOperationResponse(
        success=True,
        operation_id=dispatched.operation_id,
        message=f"Bulk {kind.value.lower()} operation started ({dispatched.total} records)",
    )


@router.get("/products/bulk/operations/{operation_id}")
def get_operation_status(
    operation_id: str,
    progress_store: ProgressStore = Depends(get_progress_store)
):
    """Current snapshot of an operation, as stored."""
    try:
        raw = read_snapshot(progress_store, operation_id)
    except ProgressStoreUnavailable:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress store not available"
        )

    if raw is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Operation not found")
    return JSONResponse(content=json.loads(raw))


@router.get("/products/bulk/export")
def export_products(
    export_type: str = Query("all", alias="type", description="all | variants"),
    export_format: str = Query("csv", alias="format", description="Only csv is supported"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Download the catalog as CSV."""
    try:
        export = export_catalog(db, export_type, export_format)
    except UnsupportedOperationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f"attachment; filename={export.filename}"},
    )


@router.delete("/products/{product_id}/variants/bulk", status_code=status.HTTP_204_NO_CONTENT)
def delete_variants_bulk(
    product_id: int,
    payload: VariantBulkDeleteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Delete many variants of one product, in batches."""
    if not payload.variant_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request body")

    try:
        variant_ids = _parse_variant_ids(payload.variant_ids)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid variant IDs")

    repo = CatalogRepository(db)
    deleted = 0
    for batch in chunked(variant_ids, settings.bulk_batch_size):
        deleted += repo.delete_variants(product_id, batch)
    db.commit()

    logger.info(f"Deleted {deleted} variants of product {product_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _parse_variant_ids(values: List[Any]) -> List[int]:
    """Accept JSON integers or digit strings only (no bools, no floats)."""
    variant_ids = []
    for value in values:
        if isinstance(value, bool):
            raise ValueError(f"Invalid variant ID: {value!r}")
        if isinstance(value, int):
            variant_ids.append(value)
        elif isinstance(value, str) and value.strip().isdigit():
            variant_ids.append(int(value.strip()))
        else:
            raise ValueError(f"Invalid variant ID: {value!r}")
    return variant_ids
