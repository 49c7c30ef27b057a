import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from api.error_handlers import (
    access_denied_handler,
    configuration_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    upstream_error_handler,
    validation_exception_handler,
)
from config import get_settings
from errors import AccessDenied, ConfigurationError, UpstreamError
from logging_config import request_id_var, setup_logging
from models.schemas import HealthResponse
from services.document_store import close_http_client, get_document_store
from services.record_service import get_confidentiality_config

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: refuse to serve requests without usable key material or store credentials
    config = get_confidentiality_config()
    get_document_store()
    logger.info(
        "Confidentiality config loaded: %d sensitive field(s), name mask policy %s",
        len(config.sensitive_fields),
        config.name_mask_policy.value,
    )

    yield

    # Shutdown
    await close_http_client()


app = FastAPI(
    title=settings.app_name,
    description="Encrypting gateway for land-registration party records",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a unique request ID to every request for traceability."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"],
    allow_headers=[
        "Authorization",
        "X-CSRF-Token",
        "X-Requested-With",
        "Accept",
        "Accept-Version",
        "Content-Length",
        "Content-MD5",
        "Content-Type",
        "Date",
        "X-Api-Version",
        "X-Request-Id",
    ],
    expose_headers=["X-Request-Id"],
)


# ─── Register Routers ─────────────────────────────────────────────────────────

from api.records import router as records_router

app.include_router(records_router, tags=["Records"])
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(AccessDenied, access_denied_handler)
app.add_exception_handler(ConfigurationError, configuration_error_handler)
app.add_exception_handler(UpstreamError, upstream_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get("/health", response_model=HealthResponse)
async def health_check(detail: bool = False):
    """Liveness check. Does not contact the document store."""
    response = HealthResponse(status="healthy", service=settings.app_name)
    if detail:
        try:
            get_confidentiality_config()
            response.confidentiality = "ok"
        except ConfigurationError:
            response.status = "degraded"
            response.confidentiality = "misconfigured"
    return response
