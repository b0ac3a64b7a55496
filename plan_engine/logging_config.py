"""
IRH Structured Logging
======================

JSON lines for production, plain text for development.

Engine log calls pass plan context through ``extra``:
- session_id, module_id, bundle_id, feature: copied as-is
- selection: a Selection, summarised as mode / size / modules
- price_cents: integer cents

Both formats render the same context, so a toggle reads the same in
a terminal and in the log pipeline.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

ID_FIELDS = ("session_id", "module_id", "bundle_id", "feature")


def plan_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the plan fields attached to a record."""
    context: Dict[str, Any] = {}

    for key in ID_FIELDS:
        value = getattr(record, key, None)
        if value:
            context[key] = value

    selection = getattr(record, "selection", None)
    if selection is not None:
        context["mode"] = selection.mode.value
        context["selection_size"] = len(selection.module_ids)
        context["modules"] = sorted(selection.module_ids)
        if selection.origin_bundle:
            context.setdefault("bundle_id", selection.origin_bundle)

    price_cents = getattr(record, "price_cents", None)
    if price_cents is not None:
        context["price_cents"] = price_cents

    return context


class JSONFormatter(logging.Formatter):
    """Output log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = plan_context(record)
        if context:
            log_entry["plan"] = context

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class PlanTextFormatter(logging.Formatter):
    """Plain text with the plan context appended: ``... [mode=custom size=3]``."""

    SHORT_NAMES = {
        "session_id": "session",
        "module_id": "module",
        "bundle_id": "bundle",
        "selection_size": "size",
        "price_cents": "cents",
    }

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = plan_context(record)
        context.pop("modules", None)
        if not context:
            return line
        pairs = " ".join(f"{self.SHORT_NAMES.get(k, k)}={v}" for k, v in context.items())
        return f"{line} [{pairs}]"


def configure_logging(level: str = "INFO", fmt: str = "json"):
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        fmt: Format - "json" for structured, "text" for plain
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(PlanTextFormatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root.addHandler(handler)

    # Request lines from uvicorn duplicate the plan session logs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
