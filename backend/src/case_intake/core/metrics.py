"""Observability helpers (logging + Prometheus metrics)."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict

import structlog
from prometheus_client import CollectorRegistry, Counter, Histogram

from .. import __version__

SERVICE_NAME = "case_intake"

REGISTRY = CollectorRegistry()

REQUEST_LATENCY = Histogram(
    "case_intake_request_seconds",
    "Latency per endpoint",
    labelnames=("endpoint",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5),
    registry=REGISTRY,
)

SUBMISSIONS = Counter(
    "case_intake_submissions_total",
    "Case submissions by outcome",
    labelnames=("outcome",),
    registry=REGISTRY,
)


def _add_service(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def configure_logging(level: str = "INFO") -> None:
    """Initialise structlog for JSON output.

    Request-scoped values bound with ``structlog.contextvars`` (the API binds
    ``request_id``, ``method`` and ``path``) are merged into every event.
    """

    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )


def mask_identifier(value: str | None, *, length: int = 12) -> str | None:
    """Replace a case id with a short digest so logs never carry raw ids."""

    text = (value or "").strip()
    if not text:
        return None
    return "case:" + hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]


__all__ = ["REGISTRY", "REQUEST_LATENCY", "SUBMISSIONS", "configure_logging", "mask_identifier"]
