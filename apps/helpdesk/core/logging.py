"""Logging and tracing setup for the helpdesk API."""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from apps.helpdesk.core.config import Settings

_ACTIVE_PROVIDER: TracerProvider | None = None

# Framework loggers that get their own handler instead of propagating to root.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def parse_headers(header_string: str | None) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` exporter headers, skipping malformed items."""

    if not header_string:
        return {}
    headers: dict[str, str] = {}
    for item in header_string.split(","):
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            continue
        headers[key.strip()] = value.strip()
    return headers


def build_logging_config(settings: Settings) -> dict[str, Any]:
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    loggers: dict[str, dict[str, Any]] = {
        name: {"handlers": ["console"], "level": level, "propagate": False} for name in _SERVER_LOGGERS
    }
    # SQL echo is only useful while debugging queries.
    loggers["sqlalchemy.engine"] = {"level": logging.INFO if level <= logging.DEBUG else logging.WARNING}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": settings.log_format}},
        "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "plain", "level": level}},
        "root": {"handlers": ["console"], "level": level},
        "loggers": loggers,
    }


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply the logging config and return the application logger."""

    config = build_logging_config(settings)
    dictConfig(config)

    app_logger = logging.getLogger(settings.app_name)
    app_logger.setLevel(config["root"]["level"])
    app_logger.debug("Logging configured for %s (%s)", settings.app_name, settings.environment)
    return app_logger


def build_span_exporter(settings: Settings) -> OTLPSpanExporter:
    """OTLP/HTTP exporter; unset options fall back to the ``OTEL_EXPORTER_OTLP_*`` environment."""

    options: dict[str, Any] = {}
    if settings.otel_exporter_otlp_endpoint:
        options["endpoint"] = settings.otel_exporter_otlp_endpoint
    headers = parse_headers(settings.otel_exporter_otlp_headers)
    if headers:
        options["headers"] = headers
    return OTLPSpanExporter(**options)


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Install the global tracer provider when tracing is switched on.

    Returns ``None`` when tracing is off or this process already installed a
    provider; the caller only shuts down a provider it was handed.
    """

    global _ACTIVE_PROVIDER

    if not settings.otel_enabled or _ACTIVE_PROVIDER is not None:
        return None

    resource = Resource.create(
        {
            SERVICE_NAME: settings.otel_service_name,
            "deployment.environment": settings.environment,
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(build_span_exporter(settings)))
    trace.set_tracer_provider(provider)
    _ACTIVE_PROVIDER = provider
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    """Flush pending spans and stop ``provider``."""

    global _ACTIVE_PROVIDER

    if provider is None:
        return
    provider.force_flush()
    provider.shutdown()
    if provider is _ACTIVE_PROVIDER:
        _ACTIVE_PROVIDER = None
