"""Structured logging setup (JSONL format)."""

from __future__ import annotations

import json
import os
import sys
import traceback
from contextvars import ContextVar
from datetime import timezone
from pathlib import Path

import platformdirs
from loguru import logger

from browser_prompt import COMPONENT

LOG_LEVEL_ENV = "BROWSER_PROMPT_LOG_LEVEL"

# Correlation ID for one prompt session
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)


def json_sink(message) -> None:
    """JSONL sink - writes one machine-readable record per line to stderr."""
    record = message.record
    log_entry = {
        "timestamp": record["time"].astimezone(timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%S.%f"
        )[:-3] + "Z",
        "level": record["level"].name.lower(),
        "component": record["function"],
        "operation": record["extra"].get("operation", "unknown"),
        "operation_status": record["extra"].get("status", None),
        "trace_id": record["extra"].get("trace_id") or trace_id_var.get(),
        "message": record["message"],
        "context": {k: v for k, v in record["extra"].items()
                    if k not in ("operation", "status", "trace_id", "metrics")},
        "metrics": record["extra"].get("metrics", {}),
        "error": None,
    }

    if record["exception"]:
        exc_type, exc_value, exc_tb = record["exception"]
        tb_lines = traceback.format_tb(exc_tb) if exc_tb else []

        log_entry["error"] = {
            "type": exc_type.__name__ if exc_type else "Unknown",
            "message": str(exc_value) if exc_value else "Unknown error",
            "traceback_lines": tb_lines,
        }

    # Logging must never crash the prompt
    try:
        sys.stderr.write(json.dumps(log_entry, default=str) + "\n")
        sys.stderr.flush()
    except (OSError, TypeError, ValueError) as e:
        try:
            sys.stderr.write(f"[LOG_ERROR] Failed to write log: {e}\n")
        except OSError:
            pass


def setup_logger(level: str | None = None):
    """
    Configure Loguru for machine-readable JSONL output.

    Outputs:
    - stderr: JSONL via json_sink (level from BROWSER_PROMPT_LOG_LEVEL, default INFO)
    - File: JSONL with rotation in the OS log directory
      macOS: ~/Library/Logs/browser-prompt/
      Linux: ~/.local/state/browser-prompt/log/
    """
    logger.remove()

    logger.add(
        json_sink,
        level=level or os.environ.get(LOG_LEVEL_ENV, "INFO").upper(),
    )

    log_dir = Path(platformdirs.user_log_dir(
        appname=COMPONENT,
        ensure_exists=True
    ))

    logger.add(
        str(log_dir / "prompt.jsonl"),
        format="{message}",
        serialize=True,
        rotation="10 MB",
        retention="7 days",
        compression="gz",
        level="DEBUG"
    )

    return logger
