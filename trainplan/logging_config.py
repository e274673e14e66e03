"""Structured JSON logging for the plan engine.

Library modules only log through ``logging.getLogger(__name__)``.  The host
application calls ``setup_logging(get_settings())`` once at startup; the
level and the ``environment`` field come from ``Settings``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from trainplan.config import Settings, get_settings
from trainplan.services.plan_model import Plan

CONTEXT_PREFIX = "ctx_"


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ``ctx_*`` extras land under ``context`` without the prefix."""

    def __init__(self, environment: Optional[str] = None) -> None:
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if self.environment:
            log_entry["environment"] = self.environment
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }
        context = {
            k[len(CONTEXT_PREFIX):]: v
            for k, v in record.__dict__.items()
            if k.startswith(CONTEXT_PREFIX)
        }
        if context:
            log_entry["context"] = context
        return json.dumps(log_entry, default=str)


def plan_log_context(plan: Plan, **values: Any) -> dict[str, Any]:
    """``extra=`` mapping identifying a plan, plus any per-call values."""
    context = {
        "ctx_methodology": plan.config.methodology,
        "ctx_plan": plan.config.name,
        "ctx_weeks": plan.summary.total_weeks,
    }
    context.update({f"{CONTEXT_PREFIX}{k}": v for k, v in values.items()})
    return context


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Attach the JSON handler to the root logger; later calls are no-ops."""
    root = logging.getLogger()
    if root.handlers:
        return

    settings = settings or get_settings()
    level = settings.log_level.upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(environment=settings.app_env))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))

    # Per-iteration enforcement lines only when debugging a plan
    logging.getLogger("trainplan.services.distribution").setLevel(
        logging.DEBUG if level == "DEBUG" else logging.INFO
    )


def get_logger(name: str) -> logging.Logger:
    """Get a named logger for a module."""
    return logging.getLogger(name)
