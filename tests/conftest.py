# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory stand-in for the Redis connection holding wizard state
# - Sample rows shaped like the Supabase tables
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from unittest.mock import MagicMock

import pytest

CLIENT_ID = "550e8400-e29b-41d4-a716-446655440000"
OTHER_CLIENT_ID = "6ba7b810-9dad-11d1-80b4-00c04fd430c8"
ADMIN_ID = "11111111-1111-4111-8111-111111111111"
TECH_ID = "22222222-2222-4222-8222-222222222222"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def memory_redis():
    """
    Redis replacement backed by a dict, installed as the wizard store's
    connection for the duration of a test.
    """
    from core.services.wizard_service import WizardStateStore

    store: dict[str, str] = {}
    fake = MagicMock()
    fake.get.side_effect = store.get
    fake.set.side_effect = lambda key, value, ex=None: store.__setitem__(key, value)
    fake.delete.side_effect = lambda key: store.pop(key, None)
    fake.store = store

    previous = WizardStateStore._redis
    WizardStateStore._redis = fake
    yield fake
    WizardStateStore._redis = previous


@pytest.fixture
def client_profile():
    """A profiles row for a client part way through onboarding."""
    return {
        "id": CLIENT_ID,
        "full_name": "Dana Reyes",
        "email": "dana@acmedental.com",
        "role": "client",
        "onboarding_status": "in_progress",
        "created_at": "2024-06-01T09:00:00Z",
    }


@pytest.fixture
def client_details_row():
    """A client_details row saved by a completed wizard."""
    return {
        "id": "cd-1",
        "client_id": CLIENT_ID,
        "company_name": "Acme Dental",
        "industry": "Healthcare",
        "company_size": "11-50 employees",
        "phone": "555-0100",
        "current_provider": "None",
        "selected_services": ["managed-it", "cybersecurity"],
        "technical_assessment": {
            "current_infrastructure": "On-prem file server",
            "operating_system": "Windows 11",
            "cloud_services": ["Microsoft 365"],
        },
        "timeline": {"preferred_start_date": "2024-07-01", "project_duration": "3 months"},
        "contract_details": {
            "service_level": "Business",
            "support_hours": "24/7",
            "response_time": "4 hours",
            "monthly_fee": 7700,
            "setup_fee": 800,
        },
        "created_at": "2024-06-02T10:00:00Z",
        "updated_at": "2024-06-03T11:00:00Z",
    }


@pytest.fixture
def sample_clients():
    """Client listing rows with embedded client_info, as the admin page sees them."""
    return [
        {
            "id": CLIENT_ID,
            "full_name": "Dana Reyes",
            "email": "dana@acmedental.com",
            "onboarding_status": "in_progress",
            "created_at": "2024-06-01T09:00:00Z",
            "client_info": {"company_name": "Acme Dental", "industry": "Healthcare"},
        },
        {
            "id": OTHER_CLIENT_ID,
            "full_name": "Sam Okafor",
            "email": "sam@northwind.io",
            "onboarding_status": "completed",
            "created_at": "2024-05-20T09:00:00Z",
            "client_info": {"company_name": "Northwind Logistics", "industry": "Retail"},
        },
        {
            "id": "33333333-3333-4333-8333-333333333333",
            "full_name": "Lee Park",
            "email": "lee@parklaw.com",
            "onboarding_status": "documents_pending",
            "created_at": "2024-05-10T09:00:00Z",
            "client_info": None,
        },
        {
            "id": "44444444-4444-4444-8444-444444444444",
            "full_name": "Ari Cohen",
            "email": "ari@cohen.org",
            "onboarding_status": "not_started",
            "created_at": "2024-05-01T09:00:00Z",
            "client_info": None,
        },
    ]


@pytest.fixture
def sample_assignments():
    """tech_assignments rows with the client embedded."""
    return [
        {
            "id": "a-1",
            "client_id": CLIENT_ID,
            "task_name": "Technical Assessment",
            "status": "pending",
            "priority": "medium",
            "due_date": "2024-06-10",
            "assigned_to": TECH_ID,
            "client": {"full_name": "Dana Reyes", "email": "dana@acmedental.com"},
        },
        {
            "id": "a-2",
            "client_id": CLIENT_ID,
            "task_name": "Schedule Kick-off Meeting",
            "status": "completed",
            "priority": "high",
            "due_date": "2024-06-04",
            "assigned_to": TECH_ID,
            "client": {"full_name": "Dana Reyes", "email": "dana@acmedental.com"},
        },
        {
            "id": "a-3",
            "client_id": OTHER_CLIENT_ID,
            "task_name": "Firewall setup",
            "status": "in_progress",
            "priority": "low",
            "due_date": "2024-06-12",
            "assigned_to": TECH_ID,
            "client": {"full_name": "Sam Okafor", "email": "sam@northwind.io"},
        },
    ]


def fake_query(data=None):
    """
    A PostgREST query builder mock: every builder call returns the builder,
    and execute() returns a response carrying `data`.
    """
    query = MagicMock()
    for method in ("select", "eq", "in_", "order", "limit", "single", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=data)
    return query


@pytest.fixture
def fake_supabase():
    """A Supabase client mock whose table() returns one shared fake query."""
    client = MagicMock()
    client.query = fake_query()
    client.table.return_value = client.query
    return client
