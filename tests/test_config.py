import logging

import pytest

from apps.helpdesk.core import logging as helpdesk_logging
from apps.helpdesk.core.config import Settings, to_async_dsn
from apps.helpdesk.core.logging import (
    build_logging_config,
    configure_logging,
    init_tracer,
    parse_headers,
    shutdown_tracer,
)


@pytest.mark.parametrize(
    ("dsn", "expected"),
    [
        ("postgresql://u:p@db:5432/helpdesk", "postgresql+asyncpg://u:p@db:5432/helpdesk"),
        ("postgres://u:p@db/helpdesk", "postgresql+asyncpg://u:p@db/helpdesk"),
        ("postgresql+asyncpg://u:p@db/helpdesk", "postgresql+asyncpg://u:p@db/helpdesk"),
        ("sqlite+aiosqlite:///./helpdesk.db", "sqlite+aiosqlite:///./helpdesk.db"),
    ],
)
def test_to_async_dsn(dsn, expected):
    assert to_async_dsn(dsn) == expected


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("TECHNICIAN_CAPACITY", "3")
    monkeypatch.setenv("STRICT_CAPACITY", "false")

    settings = Settings()

    assert settings.technician_capacity == 3
    assert settings.strict_capacity is False


def test_settings_reject_non_positive_capacity(monkeypatch):
    monkeypatch.setenv("TECHNICIAN_CAPACITY", "0")

    with pytest.raises(ValueError):
        Settings()


def test_parse_headers_skips_malformed_items():
    assert parse_headers("api-key=abc, tenant = t1,broken,=x") == {"api-key": "abc", "tenant": "t1"}
    assert parse_headers(None) == {}


def test_logging_config_falls_back_to_info_for_unknown_level():
    config = build_logging_config(Settings(log_level="chatty"))

    assert config["root"]["level"] == logging.INFO
    assert config["loggers"]["uvicorn.access"]["propagate"] is False
    assert config["loggers"]["sqlalchemy.engine"]["level"] == logging.WARNING


def test_logging_config_echoes_sql_when_debugging():
    config = build_logging_config(Settings(log_level="debug"))

    assert config["loggers"]["sqlalchemy.engine"]["level"] == logging.INFO


def test_configure_logging_applies_level():
    logger = configure_logging(Settings(log_level="warning"))

    assert logging.getLogger().level == logging.WARNING
    assert logger.name


def test_tracer_disabled_by_default():
    assert init_tracer(Settings(otel_enabled=False)) is None


def test_tracer_lifecycle_installs_one_provider():
    settings = Settings(
        otel_enabled=True,
        otel_service_name="helpdesk-test",
        environment="test",
        otel_exporter_otlp_endpoint="http://localhost:4318/v1/traces",
        otel_exporter_otlp_headers="api-key=abc",
    )

    provider = init_tracer(settings)
    try:
        assert provider is not None
        assert provider.resource.attributes["service.name"] == "helpdesk-test"
        assert provider.resource.attributes["deployment.environment"] == "test"
        assert init_tracer(settings) is None
    finally:
        shutdown_tracer(provider)

    assert helpdesk_logging._ACTIVE_PROVIDER is None
    shutdown_tracer(None)
