"""
Bulk catalog operations: CSV upload -> batches -> per-row mutations,
progress tracked in the progress store, plus the CSV exporter.
"""
from app.services.bulk.dispatcher import dispatch_bulk_operation, generate_operation_id
from app.services.bulk.executor import BatchExecutor
from app.services.bulk.exporter import export_catalog
from app.services.bulk.handlers import HANDLERS, get_handler

__all__ = [
    "BatchExecutor",
    "HANDLERS",
    "dispatch_bulk_operation",
    "export_catalog",
    "generate_operation_id",
    "get_handler",
]
