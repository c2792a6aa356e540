"""
Batch executor for bulk catalog operations.

Rows are processed in fixed-size batches, strictly one after another. Each
batch is one database transaction; each row inside it runs in its own
SAVEPOINT so a failing row is rolled back alone and reported as data.
The progress snapshot is rewritten only after a batch has committed.
"""
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.bulk_schemas import (
    BulkOperationKind,
    OperationSnapshot,
    OperationStatus,
    RecordResult,
)
from app.services.bulk.handlers import HANDLERS, RecordHandler
from app.services.progress_store import ProgressStore, write_snapshot

logger = logging.getLogger(__name__)

# Store-level failures that abort the whole operation instead of one row.
BATCH_FATAL_ERRORS = (OperationalError, InterfaceError)


def chunked(rows: Sequence[Any], size: int) -> List[Sequence[Any]]:
    """Split rows into consecutive chunks of `size` (last one shorter)."""
    if size < 1:
        raise ValueError("batch size must be positive")
    return [rows[i:i + size] for i in range(0, len(rows), size)]


class BatchExecutor:
    """Runs one bulk operation to completion or to its first fatal error."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        progress_store: ProgressStore,
        batch_size: Optional[int] = None,
        handlers: Optional[Mapping[BulkOperationKind, RecordHandler]] = None,
        stop_on_row_error: Optional[bool] = None,
        statement_timeout_seconds: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.progress_store = progress_store
        self.batch_size = batch_size or settings.bulk_batch_size
        self.handlers = handlers or HANDLERS
        self.stop_on_row_error = (
            settings.bulk_stop_on_row_error if stop_on_row_error is None else stop_on_row_error
        )
        self.statement_timeout_seconds = (
            settings.bulk_statement_timeout_seconds
            if statement_timeout_seconds is None else statement_timeout_seconds
        )

    def run(
        self,
        operation_id: str,
        kind: BulkOperationKind,
        rows: Sequence[Dict[str, Any]]
    ) -> OperationSnapshot:
        """
        Execute the operation and return its terminal snapshot.

        Never raises for row or store failures: a batch-fatal error ends
        in a FAILED snapshot that keeps the results of committed batches.
        """
        handler = self.handlers[kind]
        total = len(rows)
        results: List[RecordResult] = []
        processed = 0

        logger.info(
            f"[BULK] Operation {operation_id} started: kind={kind.value}, "
            f"rows={total}, batch_size={self.batch_size}"
        )

        for batch_number, batch in enumerate(chunked(rows, self.batch_size), start=1):
            try:
                batch_results = self._run_batch(handler, batch)
            except Exception as e:
                logger.error(
                    f"[BULK] Operation {operation_id} failed in batch {batch_number}: {e}",
                    exc_info=True
                )
                return self._finish(
                    operation_id,
                    OperationSnapshot(
                        status=OperationStatus.FAILED,
                        processed=processed,
                        total=total,
                        results=results,
                        error=str(e),
                    )
                )

            results.extend(batch_results)
            processed += len(batch)
            failed = sum(1 for r in batch_results if not r.success)
            logger.info(
                f"[BULK] Operation {operation_id} batch {batch_number} committed: "
                f"{processed}/{total} processed, {failed} failed in batch"
            )

            if failed and self.stop_on_row_error:
                return self._finish(
                    operation_id,
                    OperationSnapshot(
                        status=OperationStatus.FAILED,
                        processed=processed,
                        total=total,
                        results=results,
                        error=f"Stopped after batch {batch_number}: {failed} row(s) failed",
                    )
                )

            write_snapshot(
                self.progress_store,
                operation_id,
                OperationSnapshot(
                    status=OperationStatus.PROCESSING,
                    processed=processed,
                    total=total,
                    results=results,
                )
            )

        return self._finish(
            operation_id,
            OperationSnapshot(
                status=OperationStatus.COMPLETED,
                processed=processed,
                total=total,
                results=results,
            )
        )

    def _run_batch(
        self,
        handler: RecordHandler,
        batch: Sequence[Dict[str, Any]]
    ) -> List[RecordResult]:
        """One transaction for the batch, one savepoint per row."""
        batch_results: List[RecordResult] = []

        with self.session_factory() as db:
            with db.begin():
                self._apply_timeout(db)
                for row in batch:
                    batch_results.append(self._run_row(db, handler, row))

        return batch_results

    def _run_row(
        self,
        db: Session,
        handler: RecordHandler,
        row: Dict[str, Any]
    ) -> RecordResult:
        try:
            with db.begin_nested():
                return handler.handle(db, row)
        except BATCH_FATAL_ERRORS:
            raise
        except Exception as e:
            logger.debug(f"[BULK] Row failed ({handler.kind.value}): {e}")
            return RecordResult.failure(handler.reference(row), _row_error_message(e))

    def _apply_timeout(self, db: Session) -> None:
        # Bounds each statement of the batch, not the batch as a whole
        if not self.statement_timeout_seconds:
            return
        if db.get_bind().dialect.name == "postgresql":
            db.execute(
                text(f"SET LOCAL statement_timeout = {int(self.statement_timeout_seconds) * 1000}")
            )

    def _finish(self, operation_id: str, snapshot: OperationSnapshot) -> OperationSnapshot:
        write_snapshot(self.progress_store, operation_id, snapshot)
        failed = sum(1 for r in snapshot.results or [] if not r.success)
        logger.info(
            f"[BULK] Operation {operation_id} {snapshot.status.value}: "
            f"{snapshot.processed}/{snapshot.total} processed, {failed} row failures"
        )
        return snapshot


def _row_error_message(exc: Exception) -> str:
    # DBAPI errors wrapped by SQLAlchemy carry the driver message in `orig`
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)
