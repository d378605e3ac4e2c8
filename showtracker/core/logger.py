# showtracker/core/logger.py
from __future__ import annotations

"""
ShowTracker — Logging (Loguru)
------------------------------
- Pretty console logs by default; optional JSON logs via `LOG_JSON=1`
- Intercepts stdlib logging (package modules, SQLAlchemy, alembic) into Loguru
- Optional file sink with rotation

Library modules keep using `logging.getLogger(__name__)`; call
`configure_logging()` once at process start (the CLI does) to route those
records through the sinks below.

Env
---
LOG_LEVEL=INFO|DEBUG|WARNING|ERROR (default: INFO)
LOG_JSON=1 (enable JSON logs; pretty logs otherwise)
LOG_TO_FILE=1 (write logs/showtracker.log with rotation; default: 0)
LOG_DIR=logs
LOG_FILE=showtracker.log
LOG_ROTATION=10 MB
APP_DEBUG=1 (enables backtrace/diagnose in console sink)
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from loguru import logger

load_dotenv()


def _truthy(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# ─────────────────────────────────────────────────────────────
# 🧾 Formatters
# ─────────────────────────────────────────────────────────────
def _fmt_pretty(record) -> str:
    """Colorized single-line formatter with profile/operation context."""
    extra = record["extra"]
    context = " ".join(f"{k}={extra[k]}" for k in ("operation", "profile_id") if k in extra)
    safe_name = record["name"].replace("<", "[").replace(">", "]")
    safe_func = record["function"].replace("<", "[").replace(">", "]")
    line = (
        f"<green>{record['time']:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        f"<level>{record['level']:<8}</level> | "
        f"<cyan>{safe_name}</cyan>:<cyan>{safe_func}</cyan>:<cyan>{record['line']}</cyan> - "
        "<level>{message}</level>"
    )
    if context:
        line += f" | {context}"
    return line + "\n{exception}"


def _fmt_json(record) -> str:
    """Structured JSON logs, safe for ingestion (Datadog, Loki, ELK)."""
    payload: Dict[str, Any] = {
        "ts": record["time"].timestamp(),
        "time": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f%z"),
        "level": record["level"].name,
        "logger": record["name"],
        "func": record["function"],
        "line": record["line"],
        "message": record["message"],
    }
    for k, v in record["extra"].items():
        if k not in payload:
            payload[k] = v
    record["extra"]["_json"] = json.dumps(payload, ensure_ascii=False, default=str)
    return "{extra[_json]}\n"


# ─────────────────────────────────────────────────────────────
# 🔁 Intercept stdlib logging → Loguru
# ─────────────────────────────────────────────────────────────
class InterceptHandler(logging.Handler):
    """Route standard logging records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


_configured = False


def configure_logging(
    *,
    level: str | None = None,
    json_logs: bool | None = None,
    to_file: bool | None = None,
) -> None:
    """Install the Loguru sinks and stdlib interception (idempotent)."""
    global _configured
    if _configured:
        return

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    json_logs = _truthy("LOG_JSON") if json_logs is None else json_logs
    to_file = _truthy("LOG_TO_FILE") if to_file is None else to_file
    app_debug = _truthy("APP_DEBUG")
    fmt = _fmt_json if json_logs else _fmt_pretty

    logger.remove()
    logger.add(
        sys.stdout,
        level=level,
        format=fmt,
        enqueue=True,
        backtrace=app_debug,
        diagnose=app_debug,
    )

    if to_file:
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / os.getenv("LOG_FILE", "showtracker.log")),
            rotation=os.getenv("LOG_ROTATION", "10 MB"),
            level=level,
            format=fmt,
            enqueue=True,
            backtrace=False,
            diagnose=False,
        )

    for name in ("showtracker", "sqlalchemy.engine", "alembic"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(level if name == "showtracker" else "WARNING")
        std_logger.propagate = False

    _configured = True


__all__ = ["logger", "configure_logging", "InterceptHandler"]
