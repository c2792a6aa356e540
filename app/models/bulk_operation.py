"""SQLAlchemy model for the bulk operation history."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from app.db.base import Base


class BulkOperationLog(Base):
    """One row per submitted bulk operation (dispatch + terminal state)."""

    __tablename__ = "bulk_operation_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    operation_id = Column(String(100), unique=True, index=True, nullable=False)
    kind = Column(String(50), index=True, nullable=False,
                  comment="IMPORT, STATUS_UPDATE, CATEGORY_ASSIGNMENT, PRICE_UPDATE, VARIANT_CREATION")
    status = Column(String(20), index=True, nullable=False, default="PROCESSING",
                    comment="PROCESSING, COMPLETED, FAILED")
    total = Column(Integer, nullable=False, default=0)
    processed = Column(Integer, nullable=False, default=0)
    failed_count = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    completed_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<BulkOperationLog(operation_id={self.operation_id}, status={self.status})>"
