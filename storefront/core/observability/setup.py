import logging
from typing import Optional

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from storefront.core import config

# Probe and scrape endpoints stay out of traces and request metrics
UNOBSERVED_PATHS = ("/health", "/metrics")


def add_otel_ids(logger, log_method, event_dict):
    """structlog processor: stamp the active trace and span ids on each event."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict


def configure_logging(level: str = config.LOG_LEVEL):
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_tracing(service_name: str, app: Optional[FastAPI] = None):
    """Install the tracer provider; the gRPC server calls this without an app."""
    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    if config.OTLP_ENDPOINT:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=config.OTLP_ENDPOINT, insecure=True))
        )
    trace.set_tracer_provider(provider)

    if app is not None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=",".join(UNOBSERVED_PATHS))


def configure_metrics(app: FastAPI):
    instrumentator = Instrumentator(
        should_group_status_codes=False,
        excluded_handlers=list(UNOBSERVED_PATHS),
    )
    instrumentator.instrument(app).expose(app, include_in_schema=False)


def setup_observability(app: FastAPI, service_name: str = config.SERVICE_NAME):
    """
    Bootstraps logging, tracing and metrics for the storefront app.
    Called once from storefront.main at import time.
    """
    configure_logging()
    configure_tracing(service_name, app)
    configure_metrics(app)
