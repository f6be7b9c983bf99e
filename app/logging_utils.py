"""
Structured logging helpers for ingestion, dedup and restore workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any

REDACTED = "***"
_SENSITIVE_FIELDS = {"password", "proxy_password", "proxy_url", "authorization", "proxy_authorization"}


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Credential-bearing fields are masked before serialization.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **redact_fields(fields)}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True, ensure_ascii=False))


def redact_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {
        key: (REDACTED if key.lower() in _SENSITIVE_FIELDS and value is not None else value)
        for key, value in fields.items()
    }
