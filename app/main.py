# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Takobin API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.exceptions import (
    TakobinException,
    takobin_exception_handler,
    validation_exception_handler,
)
from app.routers import files, health, pastes
from app.auth import routes as auth_routes

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

    Logs the effective expiry policy on startup so operators can see
    whether rolling expiry is on.
    """
    logger.info(f"Starting Takobin API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(
        f"Expiry policy: guest max {settings.GUEST_MAX_EXPIRY_DAYS}d, "
        f"user max {settings.USER_MAX_EXPIRY_DAYS}d, "
        f"default {settings.DEFAULT_EXPIRY_DAYS}d, "
        f"extend on view={settings.EXTEND_EXPIRY_ON_VIEW}"
    )

    yield

    logger.info("Shutting down Takobin API")


# Create FastAPI application
app = FastAPI(
    title="Takobin API",
    description="""
## Paste Sharing API

Share text or files through a short link. Pastes expire on their own;
signed-in users can keep theirs longer, make them private, edit them and
delete them.

### Access rules

| Situation | Response |
|-----------|----------|
| Unknown id | 404 |
| Expired | 403 `PASTE_EXPIRED` |
| Private, not the owner | 403 `PASTE_PRIVATE` |
| Password protected, no password | 200 with `content: null` |
| Wrong password | 401 `INCORRECT_PASSWORD` |

### Quick Start

```bash
# 1. Create a paste
curl -X POST http://localhost:8000/api/v1/pastes \\
  -H "Content-Type: application/json" \\
  -d '{"title": "hello", "content": "print(1)", "language": "python"}'

# 2. Read it
curl http://localhost:8000/api/v1/pastes/{id}

# 3. Read a protected paste
curl http://localhost:8000/api/v1/pastes/{id} -H "X-Paste-Password: hunter2"
```
""",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Token verification for Supabase Auth sessions",
        },
        {
            "name": "Pastes",
            "description": "Create, read, update and delete pastes",
        },
        {
            "name": "Files",
            "description": "Files attached to multimedia pastes",
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

@app.exception_handler(TakobinException)
async def handle_takobin_exception(request: Request, exc: TakobinException):
    """Handle the service's own error taxonomy."""
    return await takobin_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Handle request bodies and parameters that fail validation."""
    return await validation_exception_handler(request, exc)


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

app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

app.include_router(
    pastes.router,
    prefix="/api/v1/pastes",
    tags=["Pastes"]
)

app.include_router(
    files.router,
    prefix="/api/v1",
    tags=["Files"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "Takobin API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/v1/health",
    }


# Allows running the server directly with `python -m app.main`
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
    )
