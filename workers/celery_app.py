# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# The worker that runs post-onboarding follow-ups. The API enqueues
# seed_onboarding_assignments when a client completes the wizard; the task
# runs on the "onboarding" queue and its result is polled via /tasks/{id}.
#
# Usage:
#   celery -A workers.celery_app worker -Q default,onboarding --loglevel=info
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, task_retry, worker_ready

from app.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _redacted(url: str) -> str:
    """Broker URL without credentials, for logs."""
    return url.split("@")[-1] if "@" in url else url


def create_celery_app() -> Celery:
    """Celery app with Redis as broker and result backend."""
    app = Celery(
        "onboarding_worker",
        broker=settings.REDIS_URL,
        backend=settings.REDIS_URL,
        include=["workers.tasks"],
    )
    app.config_from_object("workers.config:CeleryConfig")

    logger.info(f"Onboarding worker app created with broker: {_redacted(settings.REDIS_URL)}")
    return app


celery_app = create_celery_app()


# =============================================================================
# Signals
# =============================================================================
# Task args are a client id for every onboarding task, so log it alongside.

def _client_of(args) -> str:
    return args[0] if args else "-"


@worker_ready.connect
def worker_ready_handler(sender=None, **extra):
    queues = ", ".join(q.name for q in sender.app.amqp.queues.values())
    logger.info(f"Onboarding worker ready, consuming: {queues}")


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, **extra):
    logger.info(f"Follow-up task {task.name} [{task_id}] started for client {_client_of(args)}")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, args=None, state=None, **extra):
    logger.info(f"Follow-up task {task.name} [{task_id}] for client {_client_of(args)}: {state}")


@task_retry.connect
def task_retry_handler(sender=None, request=None, reason=None, **extra):
    logger.warning(f"Follow-up task {sender.name} [{request.id}] retrying: {reason}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, args=None, **extra):
    logger.error(
        f"Follow-up task {sender.name} [{task_id}] gave up for client {_client_of(args)}: {exception}"
    )
