# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Applied to the onboarding worker via app.config_from_object().
# =============================================================================

from app.config import settings


class CeleryConfig:
    """Queue layout, limits and serialization for onboarding follow-ups."""

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # Results are polled by the client right after completion; a day is plenty
    result_expires = 24 * 3600

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    # A seeding run is a handful of inserts; re-running it is harmless, so
    # ack late and let a crashed worker's task be redelivered
    task_acks_late = True
    worker_prefetch_multiplier = 1

    task_time_limit = 60
    task_soft_time_limit = 45

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # Report STARTED so /tasks/{id} can tell queued from running
    task_track_started = True

    # -------------------------------------------------------------------------
    # Queues
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {"exchange": "default", "routing_key": "default"},
        "onboarding": {"exchange": "onboarding", "routing_key": "onboarding"},
    }
    task_routes = {
        "workers.tasks.seed_onboarding_assignments": {"queue": "onboarding"},
    }
    task_default_queue = "default"

    timezone = "UTC"
    enable_utc = True
