from fastapi import APIRouter

from app.api.v1.endpoints.bulk_history import router as bulk_history_router
from app.api.v1.endpoints.bulk_operations import router as bulk_operations_router

api_router = APIRouter()
api_router.include_router(bulk_operations_router, tags=["bulk-operations"])
api_router.include_router(bulk_history_router, tags=["bulk-operations"])
