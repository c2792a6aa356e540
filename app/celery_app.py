"""
Celery application configuration for the catalog bulk operations service.
"""
from celery import Celery
from app.core.config import settings
from app.core.logging_config import setup_logging

setup_logging()

# Create Celery instance
celery_app = Celery(
    "catalog_bulk_operations",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "app.tasks.bulk_tasks",
    ]
)

celery_app.conf.update(
    # Serialization
    task_serializer=settings.celery_task_serializer,
    result_serializer=settings.celery_result_serializer,
    accept_content=settings.celery_accept_content,

    # Timezone
    timezone=settings.celery_timezone,
    enable_utc=settings.celery_enable_utc,

    # Local/test mode: run tasks in-process
    task_always_eager=settings.celery_task_always_eager,

    # Task execution
    task_track_started=True,
    # No time limit: an operation runs until its last batch

    # One bulk operation at a time per worker process; batches are sequential anyway
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,

    # A redelivered bulk task would re-run batches already committed
    task_acks_late=False,
    task_reject_on_worker_lost=False,

    result_expires=7200,  # Keep results for 2 hours

    task_routes={
        'app.tasks.bulk_tasks.*': {
            'queue': 'bulk_queue',
            'priority': 5
        },
    },

    # Broker connection
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,
    broker_connection_max_retries=10,
    broker_pool_limit=10,

    # Bulk payloads can be large
    task_compression='gzip',
    result_compression='gzip',
)

if __name__ == '__main__':
    celery_app.start()
