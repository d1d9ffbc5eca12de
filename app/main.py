from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import InvoiceDeskError
from app.core.observability import (
    domain_exception_handler,
    http_exception_handler,
    request_logging_middleware,
    setup_observability,
    unhandled_exception_handler,
    validation_exception_handler,
)
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.db.session import engine
from app.routers import auth, dashboard, drafts, inventory, invoices, profile

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description=(
        "Backend API for Invoice Desk: inventory, draft invoices and committed invoices.\n\n"
        "Swagger quick test flow:\n"
        "1. Call `POST /auth/register` or `POST /auth/login`.\n"
        "2. Click **Authorize** and use your email + password "
        "(OAuth token URL: `/auth/token`).\n"
        "3. Add stock under `/inventory`, build an invoice under `/drafts`, "
        "then `POST /drafts/{id}/commit`."
    ),
    swagger_ui_parameters={
        "persistAuthorization": True,
        "displayRequestDuration": True,
        "defaultModelsExpandDepth": 1,
    },
    openapi_tags=[
        {"name": "health", "description": "Service status and quick links."},
        {"name": "auth", "description": "Registration, login and the current user."},
        {"name": "inventory", "description": "Inventory items and low-stock listing."},
        {"name": "drafts", "description": "Invoices under construction, stock checks and commit."},
        {"name": "invoices", "description": "Committed invoices, status, printable document and PDF."},
        {"name": "profile", "description": "Seller details printed on invoices."},
        {"name": "dashboard", "description": "Inventory and invoicing summary."},
    ],
)

setup_observability()
app.middleware("http")(request_logging_middleware)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(InvoiceDeskError, domain_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

cors_origins = settings.cors_origins or ["http://localhost:5173"]
allow_all_origins = "*" in cors_origins
env_value = settings.env.lower().strip()
allow_origin_regex = settings.cors_origin_regex

if (
    not allow_origin_regex
    and env_value in {"dev", "development", "staging", "stage"}
):
    # Local frontends run on whatever port the dev server picks.
    allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all_origins else cors_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=not allow_all_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(inventory.router)
app.include_router(drafts.router)
app.include_router(invoices.router)
app.include_router(profile.router)
app.include_router(dashboard.router)


@app.get("/", tags=["health"])
def root():
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health",
        "ready": "/ready",
    }


@app.get("/health", tags=["health"])
def health():
    return {"ok": True}


@app.get("/ready", tags=["health"])
def ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return {"ok": False}
    return {"ok": True}
