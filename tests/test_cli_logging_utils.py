import pytest
from loguru import logger

from valconsole.cli.shared import logging_utils
from valconsole.cli.shared.logging_utils import configure_logging


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_utils, "get_log_dir", lambda: tmp_path)
    yield tmp_path
    logger.remove()
    logging_utils._SINK_IDS.clear()


def test_reconfigure_keeps_file_sink(log_dir) -> None:
    first = configure_logging(log_file=True)
    second = configure_logging(log_file=True)
    assert first == second == log_dir / "console.log"

    logger.info("after reconfigure")
    logger.complete()

    assert "after reconfigure" in second.read_text(encoding="utf-8")


def test_quiet_mode_drops_file_sink(log_dir) -> None:
    configure_logging(log_file=True)
    assert configure_logging() is None
    assert logging_utils._SINK_IDS == {}
