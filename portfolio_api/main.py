from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from portfolio_api.api import contacts, posts
from portfolio_api.core.config import settings
from portfolio_api.core.errors import APIError, RateLimited, ValidationFailed, capture_exception
from portfolio_api.core.logging_config import get_logger
from portfolio_api.core.timeutils import utcnow
from portfolio_api.core.validation import field_errors_from
from portfolio_api.db import create_db_and_tables
from portfolio_api.middleware.context import RequestContextMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(
        "Portfolio API starting",
        environment=settings.ENVIRONMENT,
        admin_enabled=bool(settings.ADMIN_PASSWORD),
        email_enabled=bool(settings.RESEND_API_KEY),
    )
    create_db_and_tables()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# Set all CORS enabled origins
origins = settings.CORS_ORIGINS + [settings.FRONTEND_URL]

# Clean up duplicates and empty strings
origins = list(set([o for o in origins if o]))

app.add_middleware(cast(Any, RequestContextMiddleware))

# GZip compression for responses > 1KB
app.add_middleware(cast(Any, GZipMiddleware), minimum_size=1000)

app.add_middleware(
    cast(Any, CORSMiddleware),
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Retry-After"],
)

# Outermost, so the request context and rate limits see the real client address
app.add_middleware(cast(Any, ProxyHeadersMiddleware), trusted_hosts=settings.FORWARDED_ALLOW_IPS)

app.include_router(contacts.router, prefix=f"{settings.API_PREFIX}/contacts", tags=["contacts"])
app.include_router(posts.router, prefix=f"{settings.API_PREFIX}/posts", tags=["posts"])


# ============== ERROR HANDLERS ==============


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimited):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationFailed(field_errors_from(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    capture_exception(exc, context={"path": request.url.path, "method": request.method})
    content = {"success": False, "message": "Internal server error"}
    if settings.is_development:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# ============== SERVICE INFO ==============


@app.get("/")
def root():
    return {
        "success": True,
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
    }


@app.get(settings.API_PREFIX)
def api_index():
    """Endpoint index for humans poking at the API."""
    prefix = settings.API_PREFIX
    return {
        "success": True,
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "health": f"GET {prefix}/health",
            "contacts": {
                "create": f"POST {prefix}/contacts",
                "list": f"GET {prefix}/contacts",
                "stats": f"GET {prefix}/contacts/stats",
                "single": f"GET {prefix}/contacts/:id",
                "update": f"PATCH {prefix}/contacts/:id",
                "delete": f"DELETE {prefix}/contacts/:id",
            },
            "posts": {
                "list": f"GET {prefix}/posts",
                "categories": f"GET {prefix}/posts/categories",
                "tags": f"GET {prefix}/posts/tags",
                "single": f"GET {prefix}/posts/:slug",
                "auth": f"POST {prefix}/posts/admin/auth",
                "admin_list": f"GET {prefix}/posts/admin/all",
                "admin_stats": f"GET {prefix}/posts/admin/stats",
                "admin_single": f"GET {prefix}/posts/admin/:id",
                "create": f"POST {prefix}/posts/admin",
                "update": f"PUT {prefix}/posts/admin/:id",
                "delete": f"DELETE {prefix}/posts/admin/:id",
            },
        },
    }


@app.get(f"{settings.API_PREFIX}/health")
def health():
    """Basic health check endpoint."""
    return {
        "success": True,
        "message": "Portfolio API is running",
        "timestamp": utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
    }
