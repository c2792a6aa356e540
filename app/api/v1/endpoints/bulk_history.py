"""
Bulk operation history endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_admin
from app.core.config import settings
from app.db.session import get_db
from app.models.user_model import User
from app.repositories.bulk_operation_repository import BulkOperationRepository
from app.schemas.bulk_schemas import BulkOperationLogResponse

router = APIRouter()


@router.get("/bulk-operations", response_model=List[BulkOperationLogResponse])
def list_bulk_operations(
    operation_status: Optional[str] = Query(
        None, alias="status", description="PROCESSING, COMPLETED, FAILED"),
    operation_type: Optional[str] = Query(
        None, alias="type", description="Operation kind, e.g. PRICE_UPDATE"),
    limit: int = Query(settings.bulk_history_limit, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """
    List submitted bulk operations, newest first.

    Unlike the progress snapshots this history does not expire.
    """
    repo = BulkOperationRepository(db)
    return repo.get_logs(
        status=operation_status.upper() if operation_status else None,
        kind=operation_type.upper() if operation_type else None,
        limit=limit,
        offset=offset
    )
