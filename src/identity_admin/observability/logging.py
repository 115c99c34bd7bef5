"""
identity_admin.observability.logging

structlog setup for the service.

Responsibilities:
- Render one JSON object per event (or a console line for local development).
- Stamp every event with the service name and UTC timestamp.
- Mask bearer credentials and secrets before anything is rendered.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor

# Event keys that may carry credentials.
_SENSITIVE_KEYS = frozenset({"token", "access_token", "authorization", "jwt_secret"})
_MASK = "***"


def configure_logging(*, service_name: str, level: str, json_logs: bool = True) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _ServiceTag(service_name),
            mask_credentials,
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class _ServiceTag:
    def __init__(self, service_name: str) -> None:
        self._service = service_name

    def __call__(self, _: Any, __: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", self._service)
        return event_dict


def mask_credentials(_: Any, __: str, event_dict: EventDict) -> EventDict:
    for key in _SENSITIVE_KEYS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str) and value.lower().startswith("bearer "):
            event_dict[key] = f"Bearer {_MASK}"
        else:
            event_dict[key] = _MASK
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# The acting admin and request id arrive through contextvars (see `middleware` and
# `auth.deps`), never as explicit arguments.
