"""Logging, tracing and metrics setup for the notes API.

Logs go through structlog and carry the active trace/span ids. Spans and
metrics are exported with OpenTelemetry; each signal picks its exporter from
``OTEL_TRACES_EXPORTER`` / ``OTEL_METRICS_EXPORTER`` (``otlp``, ``console`` or
``none``).
"""

import logging
import os

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

SERVICE_NAME_VALUE = os.getenv("OTEL_SERVICE_NAME", "vibenotes-api")
SERVICE_VERSION_VALUE = os.getenv("OTEL_SERVICE_VERSION", "0.1.0")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

logger = structlog.get_logger(__name__)


def _flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() == "true"


def _select_exporter(signal: str, otlp_cls, console_cls):
    """
    Build the exporter for one signal (``traces`` or ``metrics``).

    Returns None when the signal is disabled or has nowhere to go.
    """
    if not _flag(f"OTEL_ENABLE_{signal.upper()}"):
        logger.info("otel_signal_disabled", signal=signal)
        return None

    kind = os.getenv(f"OTEL_{signal.upper()}_EXPORTER", "console").lower()
    if kind == "otlp":
        endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        if not endpoint:
            logger.warning("otel_otlp_endpoint_missing", signal=signal)
            return None
        logger.info("otel_exporter_selected", signal=signal, exporter="otlp", endpoint=endpoint)
        return otlp_cls(endpoint=endpoint)

    if kind == "console":
        logger.info("otel_exporter_selected", signal=signal, exporter="console")
        return console_cls()

    logger.info("otel_export_disabled", signal=signal, exporter=kind)
    return None


def get_resource() -> Resource:
    return Resource.create(
        {
            SERVICE_NAME: SERVICE_NAME_VALUE,
            SERVICE_VERSION: SERVICE_VERSION_VALUE,
            "deployment.environment": ENVIRONMENT,
        }
    )


def configure_tracing() -> TracerProvider:
    provider = TracerProvider(resource=get_resource())

    exporter = _select_exporter("traces", OTLPSpanExporter, ConsoleSpanExporter)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    return provider


def configure_metrics() -> MeterProvider:
    readers = []

    exporter = _select_exporter("metrics", OTLPMetricExporter, ConsoleMetricExporter)
    if exporter is not None:
        interval = int(os.getenv("OTEL_METRIC_EXPORT_INTERVAL", "60000"))
        readers.append(PeriodicExportingMetricReader(exporter, export_interval_millis=interval))

    provider = MeterProvider(resource=get_resource(), metric_readers=readers)
    metrics.set_meter_provider(provider)
    return provider


def add_otel_context(logger, method_name, event_dict):
    """structlog processor stamping the current trace and span ids."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging():
    """Route structlog through stdlib logging as JSON (default) or coloured console lines."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("LOG_FORMAT", "json").lower()

    logging.basicConfig(format="%(message)s", level=getattr(logging, log_level, logging.INFO))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_otel_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logger.info("logging_configured", log_level=log_level, log_format=log_format)


def initialize_observability():
    """Set up logging first, then the tracer and meter providers."""
    configure_logging()
    tracer_provider = configure_tracing()
    meter_provider = configure_metrics()

    logger.info(
        "observability_initialized",
        service_name=SERVICE_NAME_VALUE,
        service_version=SERVICE_VERSION_VALUE,
        environment=ENVIRONMENT,
    )
    return tracer_provider, meter_provider


def get_tracer(name: str = __name__) -> trace.Tracer:
    return trace.get_tracer(name, SERVICE_VERSION_VALUE)


def get_meter(name: str = __name__) -> metrics.Meter:
    return metrics.get_meter(name, SERVICE_VERSION_VALUE)


class AppMetrics:
    """Counters and histograms recorded by the route handlers."""

    COUNTERS = {
        "user_signups": ("user.signups", "Accounts created"),
        "user_logins": ("user.logins", "Successful sign-ins"),
        "auth_failures": ("auth.failures", "Rejected sign-ups and sign-ins"),
        "notes_created": ("notes.created", "Notes created"),
        "notes_deleted": ("notes.deleted", "Notes deleted"),
        "tags_created": ("tags.created", "Tags created"),
        "uploads": ("uploads.accepted", "Images stored"),
        "uploads_rejected": ("uploads.rejected", "Images refused"),
    }

    def __init__(self):
        meter = get_meter("vibenotes.metrics")

        for attr, (name, description) in self.COUNTERS.items():
            setattr(self, attr, meter.create_counter(name=name, description=description, unit="1"))

        self.upload_size = meter.create_histogram(
            name="uploads.size", description="Size of accepted uploads", unit="By"
        )


_app_metrics: AppMetrics | None = None


def get_app_metrics() -> AppMetrics:
    global _app_metrics
    if _app_metrics is None:
        _app_metrics = AppMetrics()
    return _app_metrics
