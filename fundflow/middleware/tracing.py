"""
OpenTelemetry tracing with an OTLP/HTTP exporter
"""
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
import structlog
import logging

from fundflow.core.config import get_settings

# Disable verbose logging from OpenTelemetry
logging.getLogger("opentelemetry").setLevel(logging.WARNING)

logger = structlog.get_logger(__name__)


def init_tracing(app):
    """Instrument the app and the database engine when tracing is enabled"""
    settings = get_settings()
    if not settings.tracing_enabled:
        logger.info("Tracing disabled")
        return

    try:
        # Create tracer provider with service name resource
        provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: settings.service_name}))
        # Export spans over OTLP/HTTP in batches
        provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=settings.otlp_endpoint),
                max_queue_size=2048,
                max_export_batch_size=512,
                schedule_delay_millis=5000
            )
        )
        # Set global tracer provider
        trace.set_tracer_provider(provider)

        # Instrument FastAPI - exclude health and metrics endpoints
        FastAPIInstrumentor.instrument_app(app, excluded_urls="/health,/metrics,/health/ready")

        # Instrument SQLAlchemy
        try:
            from fundflow.database.database import engine
            SQLAlchemyInstrumentor().instrument(engine=engine, enable_commenter=True)
        except Exception as db_error:
            logger.warning("Failed to instrument SQLAlchemy", error=str(db_error))

        logger.info(
            "OpenTelemetry tracing initialized",
            service_name=settings.service_name,
            otlp_endpoint=settings.otlp_endpoint,
        )
    except Exception as e:
        logger.error("Failed to initialize tracing", error=str(e))
