"""
Operation dispatcher: parse the upload, register the operation and hand it
to the background worker without waiting for it.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.repositories.bulk_operation_repository import BulkOperationRepository
from app.schemas.bulk_schemas import BulkOperationKind, OperationSnapshot, OperationStatus
from app.services.bulk.tabular import decode_upload, parse_rows
from app.services.progress_store import ProgressStore, write_snapshot

logger = logging.getLogger(__name__)

# enqueue(operation_id, kind_value, rows)
Enqueue = Callable[[str, str, List[Dict[str, str]]], Any]


@dataclass
class DispatchedOperation:
    operation_id: str
    kind: BulkOperationKind
    total: int


def generate_operation_id(kind: BulkOperationKind) -> str:
    """
    `bulk_price_update_1760870400000_9f1c2ab4`

    The random suffix keeps two submissions of the same kind in the same
    millisecond from sharing a progress key.
    """
    return f"bulk_{kind.value.lower()}_{int(time.time() * 1000)}_{uuid4().hex[:8]}"


def dispatch_bulk_operation(
    kind: BulkOperationKind,
    content: bytes,
    progress_store: ProgressStore,
    enqueue: Enqueue,
    db: Optional[Session] = None,
    user_id: Optional[int] = None,
) -> DispatchedOperation:
    """
    Parse the CSV upload and start the operation in the background.

    Raises:
        TabularParseError: the file cannot be parsed
        Exception: anything raised while enqueueing (surfaced as 500)
    """
    rows = parse_rows(decode_upload(content))
    operation_id = generate_operation_id(kind)

    write_snapshot(
        progress_store,
        operation_id,
        OperationSnapshot(
            status=OperationStatus.PROCESSING,
            processed=0,
            total=len(rows),
            results=[],
        )
    )
    if db is not None:
        _record_history(db, operation_id, kind, len(rows), user_id)

    try:
        enqueue(operation_id, kind.value, rows)
    except Exception as e:
        logger.error(f"Could not enqueue bulk operation {operation_id}: {e}")
        error = f"Dispatch failed: {e}"
        write_snapshot(
            progress_store,
            operation_id,
            OperationSnapshot(
                status=OperationStatus.FAILED,
                processed=0,
                total=len(rows),
                results=[],
                error=error,
            )
        )
        if db is not None:
            _fail_history(db, operation_id, error)
        raise

    logger.info(
        f"Bulk operation {operation_id} dispatched: kind={kind.value}, rows={len(rows)}"
    )
    return DispatchedOperation(operation_id=operation_id, kind=kind, total=len(rows))


def _record_history(
    db: Session,
    operation_id: str,
    kind: BulkOperationKind,
    total: int,
    user_id: Optional[int]
) -> None:
    # History is informational; it must not block the dispatch.
    try:
        BulkOperationRepository(db).create_log(
            operation_id=operation_id,
            kind=kind.value,
            total=total,
            created_by=user_id,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Could not record history for {operation_id}: {e}")


def _fail_history(db: Session, operation_id: str, error: str) -> None:
    try:
        BulkOperationRepository(db).finish_log(
            operation_id=operation_id,
            status=OperationStatus.FAILED.value,
            processed=0,
            failed_count=0,
            error_message=error,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Could not close history for {operation_id}: {e}")
