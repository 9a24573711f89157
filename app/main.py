"""
Seller AI Gateway — marketplace content API

Standalone FastAPI application serving captions, descriptions, product
content, images, code generation and the code-assistant chat for sellers.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from app.config import settings
from app.errors import INTERNAL_SERVER_ERROR, GatewayError
from app.routers import caption, code_generator, image, product_manager, products
from app.services.llm import is_mock_mode

# =============================================================================
# LOGGING
# =============================================================================

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]
    """Application lifespan handler."""
    logger.info("Starting %s in %s mode", settings.app_name, settings.environment)
    logger.info("Text model: %s", settings.text_model)
    if is_mock_mode(settings.text_model):
        logger.warning("No credential for %s, serving mock responses", settings.text_model)
    yield
    logger.info("Shutting down %s", settings.app_name)


# =============================================================================
# APP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Seller AI Gateway — generation endpoints for marketplace sellers",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# =============================================================================
# MIDDLEWARE
# =============================================================================


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """CORS for the configured origins; ``*`` allows any origin."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self.origins = settings.cors_origins_list

    def _allowed_origin(self, origin: str) -> str | None:
        if "*" in self.origins:
            return "*"
        if origin in self.origins:
            return origin
        return None

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[no-untyped-def, override]
        origin = request.headers.get("origin", "")

        # Handle preflight
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)

        allowed = self._allowed_origin(origin)
        if allowed:
            response.headers["Access-Control-Allow-Origin"] = allowed
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = (
                "Authorization, Content-Type"
            )
            if allowed != "*":
                response.headers["Vary"] = "Origin"

        return response


_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "Cross-Origin-Resource-Policy": "same-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[no-untyped-def, override]
        response = await call_next(request)
        for name, value in _SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared Content-Length exceeds the limit."""

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[no-untyped-def, override]
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            logger.warning(
                "Rejected %s %s: body %s bytes > %d",
                request.method,
                request.url.path,
                content_length,
                self.max_bytes,
            )
            return JSONResponse(status_code=413, content={"error": "Payload Too Large"})
        return await call_next(request)


# Added innermost first; CORS wraps everything so rejections carry its headers
app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CORSHeadersMiddleware)


@app.middleware("http")
async def log_requests(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Access log: method, path, status, latency."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_content(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render the first validation message as ``{"error": msg}``."""
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"error": INTERNAL_SERVER_ERROR})


# =============================================================================
# ROUTERS
# =============================================================================

app.include_router(products.router, prefix="/api", tags=["Products"])
app.include_router(caption.router, prefix="/api/caption", tags=["Caption"])
app.include_router(image.router, prefix="/api/image", tags=["Image"])
app.include_router(
    product_manager.router,
    prefix="/api/ai-product-manager",
    tags=["AI Product Manager"],
)
app.include_router(
    code_generator.router, prefix="/api/code-generator", tags=["Code Generator"]
)


# =============================================================================
# ROOT / HEALTH
# =============================================================================


@app.get("/")
async def root() -> dict[str, object]:
    """Root endpoint."""
    return {"ok": True, "name": settings.service_name}


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check."""
    return {"status": "healthy", "service": settings.service_name}
