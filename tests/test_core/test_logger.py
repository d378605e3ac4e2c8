# tests/test_core/test_logger.py

import logging

from showtracker.core import logger as logger_module
from showtracker.core.logger import InterceptHandler, configure_logging, logger


def test_intercepted_stdlib_records_reach_loguru(monkeypatch):
    monkeypatch.setattr(logger_module, "_configured", False)
    configure_logging(level="DEBUG", json_logs=True, to_file=False)

    seen = []
    sink_id = logger.add(lambda m: seen.append(m.record["message"]), level="DEBUG")
    try:
        std = logging.getLogger("showtracker.services.watch_status_engine")
        std.info("Done updating show watch status: %d change(s)", 3)
    finally:
        logger.remove(sink_id)

    assert "Done updating show watch status: 3 change(s)" in seen
    assert any(isinstance(h, InterceptHandler) for h in logging.getLogger("showtracker").handlers)


def test_configure_is_idempotent(monkeypatch):
    monkeypatch.setattr(logger_module, "_configured", True)
    before = list(logging.getLogger("showtracker").handlers)
    configure_logging(level="INFO")
    assert logging.getLogger("showtracker").handlers == before
