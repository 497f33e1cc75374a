"""Celery application configuration."""

from typing import Any

from celery import Celery

from pharmaventory.core.config import Settings, settings


def build_beat_schedule(config: Settings) -> dict[str, dict[str, Any]]:
    """Periodic tasks for the configured backends.

    In-memory sessions are evicted by the API process, so the eviction job
    only runs for the redis backend.
    """
    schedule: dict[str, dict[str, Any]] = {}
    if config.session_backend == "redis":
        schedule["evict-idle-chat-sessions"] = {
            "task": "tasks.sessions.evict_idle",
            "schedule": float(config.session_eviction_interval_seconds),
        }
    return schedule


# Create Celery app
celery_app = Celery(
    "pharmaventory",
    broker=str(settings.redis_url),
    backend=str(settings.redis_url),
    include=[
        "pharmaventory.workers.tasks.sessions",
    ],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task safety limits
    task_time_limit=300,
    task_soft_time_limit=240,
    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=2,
    # Default queue name (must match worker -Q flag)
    task_default_queue="default",
    # Beat schedule (for periodic tasks)
    beat_schedule=build_beat_schedule(settings),
)


# Task base class with common error handling
class BaseTask(celery_app.Task):  # type: ignore[misc, name-defined]
    """Base task class with error handling."""

    abstract = True
    autoretry_for = (Exception,)
    retry_backoff = True
    retry_backoff_max = 600  # Max 10 minutes between retries
    retry_jitter = True
    max_retries = 3
