# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the onboarding API:
# - test_wizard.py: The wizard reducer and step navigation
# - test_pricing.py: Quote calculation
# - test_models.py: Unit tests for Pydantic model validation
# - test_wizard_service.py: Wizard persistence and completion
# - test_services.py: Profile, document, note and assignment services
# - test_routes.py: API endpoints and role gating
# - test_tasks.py: Background follow-up task and task status endpoint
#
# Run tests with: pytest
# =============================================================================
