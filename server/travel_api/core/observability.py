"""Observability setup for OpenTelemetry, Prometheus metrics, and structured logging."""

import logging

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

from .config import settings

SERVICE_NAME = "travel-booking-api"
SERVICE_VERSION = "1.0.0"

# Prometheus metrics
REGISTRY = CollectorRegistry()

BOOKINGS_CREATED = Counter(
    "bookings_created_total",
    "Total bookings created",
    ["package_id"],
    registry=REGISTRY
)

TRAVELERS_BOOKED = Counter(
    "booking_travelers_total",
    "Total traveler slots reserved by new bookings",
    ["package_id"],
    registry=REGISTRY
)

BOOKINGS_CANCELLED = Counter(
    "bookings_cancelled_total",
    "Total bookings cancelled",
    ["path"],
    registry=REGISTRY
)

STATUS_TRANSITIONS = Counter(
    "booking_status_transitions_total",
    "Administrative booking status transitions",
    ["from_status", "to_status"],
    registry=REGISTRY
)

CAPACITY_REJECTIONS = Counter(
    "booking_capacity_rejections_total",
    "Booking requests rejected for insufficient capacity",
    ["package_id"],
    registry=REGISTRY
)

AVAILABLE_SLOTS = Gauge(
    "package_available_slots",
    "Remaining bookable slots per package",
    ["package_id"],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict["trace_id"] = format(ctx.trace_id, "032x")
            event_dict["span_id"] = format(ctx.span_id, "016x")
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_tracing(app_name: str = SERVICE_NAME):
    """Setup OpenTelemetry tracing, exporting over OTLP when an endpoint is configured."""
    resource = Resource.create({
        "service.name": app_name,
        "service.version": SERVICE_VERSION,
        "deployment.environment": settings.environment,
    })

    provider = TracerProvider(resource=resource)
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    trace.set_tracer_provider(provider)

    return trace.get_tracer(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app, excluded_urls="health,metrics")


def instrument_sqlalchemy(engine):
    """Instrument the async engine's underlying sync engine with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for booking business metrics."""

    @staticmethod
    def record_booking_created(package_id: int, travelers: int):
        BOOKINGS_CREATED.labels(package_id=str(package_id)).inc()
        TRAVELERS_BOOKED.labels(package_id=str(package_id)).inc(travelers)

    @staticmethod
    def record_booking_cancelled(path: str):
        """Record a cancellation; ``path`` is "customer" or "admin"."""
        BOOKINGS_CANCELLED.labels(path=path).inc()

    @staticmethod
    def record_status_change(from_status: str, to_status: str):
        STATUS_TRANSITIONS.labels(from_status=from_status, to_status=to_status).inc()

    @staticmethod
    def record_capacity_rejection(package_id: int):
        CAPACITY_REJECTIONS.labels(package_id=str(package_id)).inc()

    @staticmethod
    def set_available_slots(package_id: int, slots: int):
        AVAILABLE_SLOTS.labels(package_id=str(package_id)).set(slots)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
