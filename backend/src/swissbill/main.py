"""
FastAPI application entry point.

This is the main application that ties together all components:
- API routes for payload encoding, bill rendering and references
- Logging configuration
- CORS configuration for frontend access
- Error handling for the QR-bill error taxonomy
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from swissbill import __version__
from swissbill.api.routes import bills, health
from swissbill.config import get_settings
from swissbill.domain.errors import QRBillError

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs the effective billing defaults on startup.
    """
    settings = get_settings()

    logger.info(f"Starting swissbill v{__version__}")
    logger.info(f"Default country: {settings.default_country}")
    logger.info(f"Default currency: {settings.default_currency}")
    logger.info(f"Debug mode: {settings.debug}")

    yield  # Application runs here

    logger.info("Shutting down swissbill")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance ready to serve requests.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="swissbill API",
        description=(
            "Swiss QR-bill generation.\n\n"
            "Derives QR and creditor references, encodes the Swiss Payments "
            "Code and renders the Receipt / Payment Part document as SVG."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health.router)
    app.include_router(bills.router, prefix="/api/v1")

    @app.exception_handler(QRBillError)
    async def qr_bill_exception_handler(request: Request, exc: QRBillError):
        """Generation errors are caused by the input; report them to the caller."""
        logger.warning(f"QR-bill generation failed: {type(exc).__name__}: {exc}")
        return JSONResponse(
            status_code=422,
            content={
                "error": type(exc).__name__,
                "detail": str(exc),
            },
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all exception handler for unhandled errors."""
        logger.exception(f"Unhandled error: {exc}")

        # Don't expose internal errors in production
        if settings.debug:
            detail = str(exc)
        else:
            detail = "An internal error occurred"

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": detail,
            },
        )

    return app


# Create the application instance
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "swissbill.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
