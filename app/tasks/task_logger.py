"""
Decorador para registrar en el histórico el ciclo de vida de una operación masiva.
"""
import functools
import logging
from datetime import datetime
from typing import Any, Callable, Dict

from celery import Task
from sqlalchemy.exc import SQLAlchemyError

from app.db import session as db_session
from app.repositories import BulkOperationRepository

logger = logging.getLogger(__name__)


def log_bulk_operation(func: Callable) -> Callable:
    """
    Decorador que actualiza BulkOperationLog con el estado final de la operación.

    La tarea decorada recibe `operation_id` como primer argumento y devuelve
    el snapshot final como dict. Los fallos al escribir el histórico se
    registran en el log y no alteran el resultado de la operación.

    Uso:
        @celery_app.task(bind=True)
        @log_bulk_operation
        def my_task(self, operation_id, kind, rows):
            ...
    """
    @functools.wraps(func)
    def wrapper(self: Task, operation_id: str, *args, **kwargs) -> Any:
        logger.info(f"Task {self.name} [{self.request.id}] started for {operation_id}")

        result = func(self, operation_id, *args, **kwargs)
        record_terminal_state(operation_id, result)

        logger.info(
            f"Task {self.name} [{self.request.id}] {operation_id} -> {result.get('status')}"
        )
        return result

    return wrapper


def record_terminal_state(operation_id: str, result: Dict[str, Any]) -> None:
    """
    Cierra la fila de BulkOperationLog con el snapshot final.

    Los errores de base de datos se registran y no se propagan.
    """
    results = result.get("results") or []
    db = db_session.SessionLocal()
    try:
        BulkOperationRepository(db).finish_log(
            operation_id=operation_id,
            status=result.get("status"),
            processed=result.get("processed", 0),
            failed_count=sum(1 for r in results if not r.get("success")),
            error_message=result.get("error"),
            completed_at=datetime.utcnow()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Could not update history for {operation_id}: {exc}")
    finally:
        db.close()
