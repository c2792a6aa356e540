from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./catalog.db"
    log_level: str = "INFO"
    cors_origins: List[str] = [
        "http://localhost",
        "http://localhost:3000",
    ]

    # Redis (progress store)
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 5.0

    # Celery
    celery_broker_url: str = "redis://localhost:6379/1"
    celery_result_backend: str = "redis://localhost:6379/2"
    celery_task_serializer: str = "json"
    celery_result_serializer: str = "json"
    celery_accept_content: List[str] = ["json"]
    celery_timezone: str = "UTC"
    celery_enable_utc: bool = True
    celery_task_always_eager: bool = False

    # Bulk operations
    bulk_batch_size: int = 100
    bulk_progress_ttl_seconds: int = 300  # 5 minutes
    bulk_progress_key_prefix: str = "bulk_op:"
    bulk_statement_timeout_seconds: Optional[int] = 60  # per statement, PostgreSQL only
    bulk_stop_on_row_error: bool = False
    bulk_history_limit: int = 100

    class Config:
        env_file = ".env"


settings = Settings()
