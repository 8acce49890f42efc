from pathlib import Path

import pytest
from loguru import logger

from src.attestkit.utils.logger import setup_logger


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


def test_terminal_level_is_configurable(tmp_path, capsys):
    setup_logger(log_dir=str(tmp_path / "logs"), level="WARNING")

    logger.info("routine detail")
    logger.warning("round not finalized")
    logger.complete()

    err = capsys.readouterr().err
    assert "round not finalized" in err
    assert "routine detail" not in err


def test_file_sink_keeps_debug(tmp_path):
    log_dir = tmp_path / "logs"
    setup_logger(log_dir=str(log_dir), level="ERROR")

    logger.debug("request body")
    logger.complete()

    assert log_dir.is_dir()
    assert list(Path(log_dir).glob("attestkit_*.log"))
