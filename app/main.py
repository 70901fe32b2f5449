# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the IT client onboarding API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    OnboardingException,
    onboarding_exception_handler,
    supabase_exception_handler,
)
from app.routers import health, onboarding, dashboard, documents, admin, tech, tasks
from app.auth import routes as auth_routes
from lib.supabase_client import SupabaseClientError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the configuration the app starts with; connections to Supabase
    and Redis are opened lazily on first use.
    """
    logger.info(f"Starting onboarding API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down onboarding API")


# Create FastAPI application
app = FastAPI(
    title="IT Client Onboarding API",
    description="""
## Managed IT Client Onboarding

Self-service onboarding for new managed-IT clients, with dashboards for
the provider's admins and technicians.

### How It Works

1. **Register / Log in** - Supabase Auth; every self-registered user is a client
2. **Onboarding Wizard** - Six steps: client info, services, technical
   assessment, timeline, contract, completion
3. **Documents** - Upload contracts, diagrams and other files per client
4. **Follow-up** - Completing onboarding queues the kick-off tasks for a tech

### Roles

| Role | Home | Can use |
|------|------|---------|
| **client** | `/dashboard` | Wizard, own dashboard, own documents |
| **admin** | `/admin` | Every client, notes, status, assignments, export |
| **tech** | `/tech` | Active clients, own assignments, client detail |

Calling an endpoint outside your role returns 403 with your home route in
`details.redirect`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Registration, login and the current user's profile",
        },
        {
            "name": "Onboarding",
            "description": "The 6-step onboarding wizard",
        },
        {
            "name": "Dashboard",
            "description": "Client dashboard",
        },
        {
            "name": "Documents",
            "description": "Client document upload, download and deletion",
        },
        {
            "name": "Admin",
            "description": "Client management for admins",
        },
        {
            "name": "Tech",
            "description": "Technician dashboard and assignments",
        },
        {
            "name": "Tasks",
            "description": "Track background task progress",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(OnboardingException)
async def handle_onboarding_exception(request: Request, exc: OnboardingException):
    """Handle custom onboarding exceptions."""
    return await onboarding_exception_handler(request, exc)


@app.exception_handler(SupabaseClientError)
async def handle_supabase_exception(request: Request, exc: SupabaseClientError):
    """Handle data-layer failures."""
    logger.error(f"Supabase error [{exc.code}]: {exc.message}")
    return await supabase_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Onboarding wizard endpoints
app.include_router(
    onboarding.router,
    prefix="/api/v1/onboarding",
    tags=["Onboarding"]
)

# Client dashboard
app.include_router(
    dashboard.router,
    prefix="/api/v1/dashboard",
    tags=["Dashboard"]
)

# Document endpoints
app.include_router(
    documents.router,
    prefix="/api/v1/documents",
    tags=["Documents"]
)

# Admin endpoints
app.include_router(
    admin.router,
    prefix="/api/v1/admin",
    tags=["Admin"]
)

# Tech endpoints
app.include_router(
    tech.router,
    prefix="/api/v1/tech",
    tags=["Tech"]
)

# Task status endpoints
app.include_router(
    tasks.router,
    prefix="/api/v1/tasks",
    tags=["Tasks"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "IT Client Onboarding API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
