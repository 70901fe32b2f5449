# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Background work triggered by the API, such as seeding follow-up
# assignments once a client completes onboarding.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker (both queues)
#   celery -A workers.celery_app worker -Q default,onboarding --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import seed_onboarding_assignments
#   result = seed_onboarding_assignments.delay(client_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
