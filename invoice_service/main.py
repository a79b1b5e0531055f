"""
FastAPI Application Entry Point - Invoice Service
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from invoice_service import __version__
from invoice_service.config import settings
from invoice_service.database import init_db
from invoice_service.logging_config import setup_logging
from invoice_service.schemas.invoice import ErrorDetail
from invoice_service.api import artifacts, health, invoices
from invoice_service.storage.artifact_store import get_artifact_store

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Invoice Service",
    description="Microservice for rendering, storing and regenerating order invoices",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(invoices.router)
app.include_router(artifacts.router)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed invoice requests as invalid-argument errors"""
    if not request.url.path.startswith(invoices.router.prefix):
        return await request_validation_exception_handler(request, exc)

    logger.warning("Rejected %s request: %s", request.url.path, exc.errors())
    detail = ErrorDetail(
        code="invalid-argument",
        message="Request body must be a JSON object with a string orderId"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": detail.model_dump()}
    )


@app.on_event("startup")
def startup_event():
    """Initialize database and artifact store on startup"""
    setup_logging()
    logger.info("Starting %s...", settings.SERVICE_NAME)
    init_db()
    logger.info("✓ Database initialized")
    store = get_artifact_store()
    store.ensure_base_dir()
    logger.info("✓ Artifact storage: %s", store.base_dir)
    logger.info("✓ %s is running on port %s", settings.SERVICE_NAME, settings.SERVICE_PORT)
    logger.info("✓ To start consumer, run: python run_consumer.py")


@app.on_event("shutdown")
def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down %s...", settings.SERVICE_NAME)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("invoice_service.main:app", host="0.0.0.0", port=settings.SERVICE_PORT)
