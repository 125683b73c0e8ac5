from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
import logging
import structlog
import sys
import time
import uvicorn

from fundflow.core.config import get_settings
from fundflow.core.exceptions import FundflowError, InternalError
from fundflow.database.database import get_db, init_db, close_db
from fundflow.api.auth import router as auth_router
from fundflow.api.users import router as users_router
from fundflow.api.campaigns import router as campaigns_router
from fundflow.api.donations import router as donations_router
from fundflow.api.admin import router as admin_router
from fundflow.middleware.tracing import init_tracing
from fundflow.middleware.metrics import MetricsMiddleware, metrics_endpoint
from fundflow.middleware.logging import logging_middleware
from fundflow.services.notifications import EmailNotifier
from fundflow.services.payment_client import StripePaymentClient

settings = get_settings()

# Setup structured logging
logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level.upper())
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Crowdfunding API: accounts, campaigns, donations and moderation",
    version="1.0.0",
    debug=settings.debug
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize tracing (must be done before startup events)
init_tracing(app)

# Add metrics middleware
app.add_middleware(MetricsMiddleware)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Logging middleware with trace correlation"""
    return await logging_middleware(request, call_next)


def error_response(exc: FundflowError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "error": exc.kind}
    )


@app.exception_handler(FundflowError)
async def fundflow_exception_handler(request: Request, exc: FundflowError):
    if exc.status_code >= 500:
        logger.error("Request failed", error=exc.message, kind=exc.kind, path=request.url.path)
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "message": "Invalid request",
            "error": "ValidationError",
            "details": jsonable_encoder(exc.errors())
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        url=str(request.url)
    )
    return error_response(InternalError("Internal server error"))


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("Starting FundFlow API", service_name=settings.service_name)

    try:
        # Initialize database
        init_db()

        # Outbound clients shared by all requests
        app.state.payment_client = StripePaymentClient.from_settings(settings)
        app.state.notifier = EmailNotifier.from_settings(settings)

        if not settings.stripe_secret_key:
            logger.warning("STRIPE_SECRET_KEY not set, payment intents will fail")
        if not settings.sendgrid_api_key:
            logger.warning("SENDGRID_API_KEY not set, donation emails are disabled")

        logger.info("Application startup completed successfully")
    except Exception as e:
        logger.error("Failed to initialize application", error=str(e))
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown"""
    logger.info("Shutting down FundFlow API")

    try:
        # Close database connections
        close_db()
        logger.info("Application shutdown completed successfully")
    except Exception as e:
        logger.error("Error during application shutdown", error=str(e))


# Health check endpoints
@app.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "timestamp": time.time()
    }


@app.get("/health/ready")
def readiness_check(db: Session = Depends(get_db)):
    """Readiness check against the database"""
    health_status = {
        "status": "ready",
        "service": settings.service_name,
        "timestamp": time.time(),
        "database": "connected"
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
    except Exception as db_e:
        logger.warning("Database health check failed", error=str(db_e))
        health_status["status"] = "not ready"
        health_status["database"] = f"error: {str(db_e)}"
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/metrics")
async def metrics(request: Request):
    """Prometheus metrics endpoint"""
    return await metrics_endpoint(request)


# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(campaigns_router)
app.include_router(donations_router)
app.include_router(admin_router)


if __name__ == "__main__":
    uvicorn.run(
        "fundflow.main:app",
        host="0.0.0.0",
        port=5000,
        reload=settings.debug,
        log_level="info" if not settings.debug else "debug"
    )
