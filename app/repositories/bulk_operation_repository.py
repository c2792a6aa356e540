"""
Bulk operation repository.

Handles the bulk operation history table.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.bulk_operation import BulkOperationLog


class BulkOperationRepository:
    """Repository for bulk operation history records."""

    def __init__(self, db: Session):
        self.db = db

    def create_log(
        self,
        operation_id: str,
        kind: str,
        total: int,
        created_by: Optional[int] = None,
        status: str = "PROCESSING"
    ) -> BulkOperationLog:
        """
        Create the history record of a dispatched operation.

        Args:
            operation_id: Operation identifier returned to the caller
            kind: Operation kind
            total: Number of parsed rows
            created_by: ID of the submitting user
            status: Initial status

        Returns:
            Created BulkOperationLog record
        """
        log = BulkOperationLog(
            operation_id=operation_id,
            kind=kind,
            status=status,
            total=total,
            processed=0,
            failed_count=0,
            created_by=created_by
        )
        self.db.add(log)
        self.db.commit()
        return log

    def get_log(self, operation_id: str) -> Optional[BulkOperationLog]:
        return self.db.query(BulkOperationLog).filter(
            BulkOperationLog.operation_id == operation_id
        ).first()

    def finish_log(
        self,
        operation_id: str,
        status: str,
        processed: int,
        failed_count: int,
        error_message: Optional[str] = None,
        completed_at: Optional[datetime] = None
    ) -> Optional[BulkOperationLog]:
        """
        Record the terminal state of an operation.

        Returns:
            Updated record or None if the operation has no history row
        """
        log = self.get_log(operation_id)
        if log:
            log.status = status
            log.processed = processed
            log.failed_count = failed_count
            log.error_message = error_message
            log.completed_at = completed_at or datetime.utcnow()
            self.db.commit()
            self.db.refresh(log)
        return log

    def get_logs(
        self,
        status: Optional[str] = None,
        kind: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[BulkOperationLog]:
        """
        Get history records, newest first.

        Args:
            status: Filter by status
            kind: Filter by operation kind
            limit: Maximum number of records
            offset: Number of records to skip
        """
        query = self.db.query(BulkOperationLog)

        if status:
            query = query.filter(BulkOperationLog.status == status)
        if kind:
            query = query.filter(BulkOperationLog.kind == kind)

        return query.order_by(
            BulkOperationLog.id.desc()
        ).offset(offset).limit(limit).all()
