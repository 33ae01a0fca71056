import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from bracket_anything.core.logging_utils import configure_logging, rotate_log_if_needed


def test_rotate_log_by_size(tmp_path, monkeypatch):
    monkeypatch.setenv("BRACKET_LOG_MAX_BYTES", "10")
    monkeypatch.setenv("BRACKET_LOG_MAX_AGE_HOURS", "0")
    log_path = tmp_path / "bracket.log"
    log_path.write_text("x" * 20, encoding="utf-8")

    rotate_log_if_needed(log_path)

    assert not log_path.exists()
    assert len(list(tmp_path.glob("bracket.*.log"))) == 1


def test_small_log_is_kept(tmp_path, monkeypatch):
    monkeypatch.setenv("BRACKET_LOG_MAX_BYTES", "1000")
    monkeypatch.setenv("BRACKET_LOG_MAX_AGE_HOURS", "0")
    log_path = tmp_path / "bracket.log"
    log_path.write_text("short", encoding="utf-8")

    rotate_log_if_needed(log_path)

    assert log_path.read_text(encoding="utf-8") == "short"


def test_configure_logging_replaces_handlers(tmp_path):
    log_path = tmp_path / "logs" / "bracket.log"
    configure_logging(log_path)
    logger = configure_logging(log_path)

    assert len(logger.handlers) == 2
    logging.getLogger("bracket_anything.core.scorer").info("scored")
    for handler in logger.handlers:
        handler.flush()
    assert "scored" in log_path.read_text(encoding="utf-8")
    configure_logging()
