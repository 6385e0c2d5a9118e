"""OpenTelemetry metrics and logs for the crypto ledger."""

import logging
import os
from decimal import Decimal

from opentelemetry import metrics
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from cryptoledger._version import VERSION


# Module-level state
_initialized = False
_meter = None
_log_handler = None

# Counters (cumulative)
_trades_total = None
_trade_quantity_total = None
_trade_value_total = None
_trade_rejections_total = None

# Latest portfolio value per user, exported through an observable gauge
_portfolio_values: dict[int, float] = {}


def setup_telemetry() -> bool:
    """Initialize OpenTelemetry metrics and logs.

    Returns True if telemetry was initialized, False if disabled.
    """
    global _initialized, _meter, _log_handler
    global _trades_total, _trade_quantity_total, _trade_value_total
    global _trade_rejections_total

    if _initialized:
        return True

    # Check if telemetry is enabled
    if os.getenv("OTLP_ENABLED", "true").lower() == "false":
        return False

    # Get configuration from environment
    otlp_endpoint = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/metrics")
    export_interval = int(os.getenv("OTLP_EXPORT_INTERVAL", "5000"))

    resource = Resource.create({
        "service.name": "crypto-ledger",
        "service.version": VERSION,
    })

    exporter = OTLPMetricExporter(endpoint=otlp_endpoint)
    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=export_interval,
    )
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(provider)

    _meter = metrics.get_meter("crypto_ledger", VERSION)

    _trades_total = _meter.create_counter(
        "ledger_trades_total",
        description="Total number of trades committed",
        unit="1",
    )

    _trade_quantity_total = _meter.create_counter(
        "ledger_trade_quantity_total",
        description="Total units of cryptocurrency traded",
        unit="units",
    )

    _trade_value_total = _meter.create_counter(
        "ledger_trade_value_total",
        description="Total cash value of trades",
        unit="currency",
    )

    _trade_rejections_total = _meter.create_counter(
        "ledger_trade_rejections_total",
        description="Trades rejected by a business rule or storage failure",
        unit="1",
    )

    _meter.create_observable_gauge(
        "portfolio_total_value",
        callbacks=[_portfolio_value_callback],
        description="Total portfolio value (cash + holdings)",
        unit="currency",
    )

    # === LOGS ===
    logs_endpoint = otlp_endpoint.replace("/v1/metrics", "/v1/logs")
    log_exporter = OTLPLogExporter(endpoint=logs_endpoint)
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))
    set_logger_provider(logger_provider)

    _log_handler = LoggingHandler(
        level=logging.INFO,
        logger_provider=logger_provider,
    )

    _initialized = True
    return True


def get_log_handler() -> LoggingHandler | None:
    """Get the OTLP logging handler to attach to Python loggers."""
    return _log_handler


def is_enabled() -> bool:
    """Check if telemetry is initialized and enabled."""
    return _initialized


# --- Counter update functions ---

def record_trade(symbol: str, side: str, quantity: Decimal, total: Decimal) -> None:
    """Record a committed trade."""
    if not _initialized:
        return

    attributes = {"symbol": symbol, "side": side}
    _trades_total.add(1, attributes)
    _trade_quantity_total.add(float(quantity), attributes)
    _trade_value_total.add(float(total), attributes)


def record_rejection(side: str, reason: str) -> None:
    """Record a trade that was not applied."""
    if not _initialized:
        return

    _trade_rejections_total.add(1, {"side": side, "reason": reason})


# --- Portfolio gauge ---

def _portfolio_value_callback(options):
    for user_id, value in list(_portfolio_values.items()):
        yield metrics.Observation(value, {"user_id": str(user_id)})


def record_portfolio_value(user_id: int, total_value: Decimal) -> None:
    """Record the latest portfolio value for a user.

    Called when the portfolio summary is read.
    """
    if not _initialized:
        return

    _portfolio_values[user_id] = float(total_value)
