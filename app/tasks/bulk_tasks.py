"""
Celery tasks for bulk catalog operations.
"""
import logging
from typing import Any, Dict, List

from celery import Task

from app.celery_app import celery_app
from app.core.config import settings
from app.core.exceptions import ProgressStoreUnavailable
from app.db import session as db_session
from app.schemas.bulk_schemas import BulkOperationKind, OperationSnapshot, OperationStatus
from app.services.bulk.executor import BatchExecutor
from app.services.progress_store import get_progress_store, read_snapshot, write_snapshot
from app.tasks.task_logger import log_bulk_operation, record_terminal_state

logger = logging.getLogger(__name__)


class BulkOperationTask(Task):
    """
    Base task: a bulk operation is never retried (committed batches stay).
    A crash still ends the operation as FAILED in the progress store and history.
    """
    max_retries = 0

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        operation_id = args[0] if args else kwargs.get("operation_id")
        rows = args[2] if len(args) > 2 else kwargs.get("rows")
        logger.error(f"[BULK TASK] {operation_id} [{task_id}] crashed: {exc}")
        if operation_id:
            mark_operation_failed(operation_id, len(rows or []), str(exc))


def mark_operation_failed(operation_id: str, total: int, error: str) -> Dict[str, Any]:
    """
    Write the FAILED terminal state of an operation whose task crashed.

    Keeps the progress of the batches already committed, as found in the
    last snapshot, and closes the history row.
    """
    store = get_progress_store()
    try:
        raw = read_snapshot(store, operation_id)
    except ProgressStoreUnavailable:
        raw = None
    previous = OperationSnapshot.from_json(raw) if raw else None

    snapshot = OperationSnapshot(
        status=OperationStatus.FAILED,
        processed=previous.processed if previous else 0,
        total=previous.total if previous else total,
        results=(previous.results if previous else None) or [],
        error=error,
    )
    write_snapshot(store, operation_id, snapshot)

    result = snapshot.model_dump(mode="json", exclude_none=True)
    record_terminal_state(operation_id, result)
    return result


@celery_app.task(
    bind=True,
    base=BulkOperationTask,
    name="app.tasks.bulk_tasks.run_bulk_operation",
)
@log_bulk_operation
def run_bulk_operation(
    self,
    operation_id: str,
    kind: str,
    rows: List[Dict[str, str]]
) -> Dict[str, Any]:
    """
    Ejecuta una operación masiva en segundo plano.

    Args:
        operation_id: Identificador devuelto al cliente
        kind: Valor de BulkOperationKind
        rows: Filas del CSV ya parseadas

    Returns:
        Snapshot final (COMPLETED o FAILED) como dict
    """
    logger.info(f"[BULK TASK] Running {operation_id} ({kind}, {len(rows)} rows)")

    executor = BatchExecutor(
        session_factory=db_session.SessionLocal,
        progress_store=get_progress_store(),
        batch_size=settings.bulk_batch_size,
    )
    snapshot = executor.run(operation_id, BulkOperationKind(kind), rows)
    return snapshot.model_dump(mode="json", exclude_none=True)


def enqueue_bulk_operation(operation_id: str, kind: str, rows: List[Dict[str, str]]):
    """Send the operation to the worker; returns the Celery AsyncResult."""
    return run_bulk_operation.apply_async(
        args=(operation_id, kind, rows),
        task_id=operation_id,
    )
