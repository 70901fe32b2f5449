# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the onboarding business logic:
# - models/: Pydantic schemas for data validation
# - wizard.py: The onboarding wizard reducer and step submissions
# - pricing.py: Service catalog and contract quote
# - services/: Database, storage and Redis-backed operations
#
# Code in this package should NOT import from FastAPI routers or Celery
# tasks. This keeps the logic testable and reusable.
# =============================================================================
