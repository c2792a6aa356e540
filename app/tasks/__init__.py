"""
Celery tasks package initialization.
"""
from app.tasks.bulk_tasks import enqueue_bulk_operation, run_bulk_operation

__all__ = ["enqueue_bulk_operation", "run_bulk_operation"]
