# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# Builds the Job Tracker FastAPI app: creates tables on startup, installs CORS
# and the JSON error envelope handlers, and mounts every router under /api/v1.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.auth import oauth as oauth_routes
from app.auth import routes as auth_routes
from app.config import settings
from app.exceptions import (
    JobTrackerException,
    jobtracker_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.routers import (
    account,
    applications,
    attachment_links,
    billing,
    contacts,
    dashboard,
    documents,
    email_preferences,
    health,
    interviews,
    labels,
    notes,
    onboarding,
    reminders,
    salary_offers,
    sessions,
    tasks,
)
from lib.database import init_db

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Create missing tables, log the effective config
    - Shutdown: Log
    """
    logger.info(f"Starting Job Tracker API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.stripe_configured:
        logger.warning("Stripe is not configured; billing endpoints will return 503")

    init_db()

    yield

    logger.info("Shutting down Job Tracker API")


# Create FastAPI application
app = FastAPI(
    title="Job Tracker API",
    description="""
## Job Application Tracker

Keep every job application, interview, task and offer in one place.

### Features

- **Pipeline**: Applications move through SAVED, APPLIED, INTERVIEW, OFFER, REJECTED
- **Interviews & Tasks**: Scheduled interviews and to-dos with email reminders
- **Notes, Contacts, Links**: Everything you learn about a company, attached to the application
- **Documents**: Resume and cover letter versions, one default per type
- **CSV**: Import from a spreadsheet, export (Pro) for your own analysis
- **Security**: Password + OAuth sign-in, TOTP 2FA, per-device sessions, audit log

### Plans

| Plan | Applications | CSV export |
|------|--------------|------------|
| **Free** | 200 | - |
| **Pro** | Unlimited | Yes |

### Quick Start

```bash
# 1. Register
curl -X POST http://localhost:8000/api/v1/auth/register \\
  -H "Content-Type: application/json" \\
  -d '{"email": "me@example.com", "password": "correct horse"}'

# 2. Track an application
curl -X POST http://localhost:8000/api/v1/applications \\
  -H "Authorization: Bearer <access_token>" \\
  -H "Content-Type: application/json" \\
  -d '{"company": "Acme", "title": "Backend Engineer", "stage": "APPLIED"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Register, sign in, password reset, OAuth and 2FA"},
        {"name": "Applications", "description": "Job applications, search, bulk edits, CSV"},
        {"name": "Interviews", "description": "Scheduled interviews"},
        {"name": "Tasks", "description": "To-do items"},
        {"name": "Notes", "description": "Free-text notes on an application"},
        {"name": "Contacts", "description": "Recruiters and other people"},
        {"name": "Links", "description": "Links to external files"},
        {"name": "Documents", "description": "Resumes, cover letters and portfolios"},
        {"name": "Labels", "description": "Coloured labels"},
        {"name": "Offers", "description": "Salary offer history"},
        {"name": "Email Preferences", "description": "Reminder and digest settings"},
        {"name": "Sessions", "description": "Signed-in devices"},
        {"name": "Account", "description": "Profile, password and linked providers"},
        {"name": "Billing", "description": "Pro subscription via Stripe"},
        {"name": "Dashboard", "description": "Pipeline summary"},
        {"name": "Audit", "description": "Account activity log"},
        {"name": "Onboarding", "description": "Sample data for new accounts"},
        {"name": "Reminders", "description": "Cron-triggered jobs"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# Any origin outside production
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

@app.exception_handler(JobTrackerException)
async def handle_jobtracker_exception(request: Request, exc: JobTrackerException):
    """Handle custom Job Tracker exceptions."""
    return await jobtracker_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    return await unhandled_exception_handler(request, exc)


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints (routers carry their own /auth prefix)
app.include_router(auth_routes.router, prefix=API_PREFIX)
app.include_router(oauth_routes.router, prefix=API_PREFIX)

# Health check endpoints
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])

# Applications and their children
app.include_router(applications.router, prefix=f"{API_PREFIX}/applications", tags=["Applications"])
app.include_router(interviews.router, prefix=f"{API_PREFIX}/interviews", tags=["Interviews"])
app.include_router(tasks.router, prefix=f"{API_PREFIX}/tasks", tags=["Tasks"])
app.include_router(notes.router, prefix=f"{API_PREFIX}/notes", tags=["Notes"])
app.include_router(contacts.router, prefix=f"{API_PREFIX}/contacts", tags=["Contacts"])
app.include_router(attachment_links.router, prefix=f"{API_PREFIX}/links", tags=["Links"])
app.include_router(documents.router, prefix=f"{API_PREFIX}/documents", tags=["Documents"])
app.include_router(labels.router, prefix=f"{API_PREFIX}/labels", tags=["Labels"])
app.include_router(salary_offers.router, prefix=f"{API_PREFIX}/offers", tags=["Offers"])

# User settings
app.include_router(
    email_preferences.router,
    prefix=f"{API_PREFIX}/email-preferences",
    tags=["Email Preferences"]
)
app.include_router(sessions.router, prefix=f"{API_PREFIX}/sessions", tags=["Sessions"])
app.include_router(account.router, prefix=f"{API_PREFIX}/account", tags=["Account"])
app.include_router(billing.router, prefix=f"{API_PREFIX}/billing", tags=["Billing"])

# Overview
app.include_router(dashboard.router, prefix=f"{API_PREFIX}/dashboard", tags=["Dashboard"])
app.include_router(dashboard.audit_router, prefix=f"{API_PREFIX}/audit", tags=["Audit"])
app.include_router(onboarding.router, prefix=f"{API_PREFIX}/onboarding", tags=["Onboarding"])

# Scheduler-triggered jobs
app.include_router(reminders.router, prefix=f"{API_PREFIX}/cron/reminders", tags=["Reminders"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Job Tracker API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
    }
