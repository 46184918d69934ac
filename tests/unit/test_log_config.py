import logging

import pytest
import structlog

from discount_monitor.utils.log_config import configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    for h in saved_handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(saved_level)
    structlog.reset_defaults()


def test_events_are_appended_to_log_file(tmp_path, restore_logging):
    path = tmp_path / "price-monitor.log"
    path.write_text("previous line\n", encoding="utf-8")

    configure_logging(str(path), "INFO")
    structlog.get_logger("test").info("discount_detected", discount_pct="9.09")
    structlog.get_logger("test").debug("hidden_at_info")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "previous line"
    assert len(lines) == 2
    assert "discount_detected" in lines[1]
    assert "discount_pct=9.09" in lines[1]
    # ISO timestamp at the start of the line
    assert lines[1][:4].isdigit() and "T" in lines[1][:20]


def test_no_file_sink_when_disabled(tmp_path, restore_logging):
    configure_logging(None, "DEBUG")
    root = logging.getLogger()
    assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
    assert root.level == logging.DEBUG
