# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - onboarding.py: The 6-step onboarding wizard
# - dashboard.py: Client dashboard
# - documents.py: Document upload, download and deletion
# - admin.py: Admin dashboard, client detail, notes and assignments
# - tech.py: Tech dashboard and assignment progress
# - tasks.py: Background task status endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import onboarding
from . import dashboard
from . import documents
from . import admin
from . import tech
from . import tasks

__all__ = [
    "health",
    "onboarding",
    "dashboard",
    "documents",
    "admin",
    "tech",
    "tasks",
]
