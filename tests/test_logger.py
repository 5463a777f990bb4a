# tests/test_logger.py
from loguru import logger

from cvflow import logger as cvflow_logger
from cvflow.logger import configure_logging


def test_configure_logging_writes_dated_file(tmp_path):
    log_dir = tmp_path / "logs"

    configure_logging(level="DEBUG", log_dir=log_dir, force=True)
    logger.info("fold evaluator ready")
    # reconfiguring removes (and closes) the file sink
    configure_logging(force=True)

    files = list(log_dir.glob("*.log"))
    assert len(files) == 1
    assert "fold evaluator ready" in files[0].read_text()


def test_configure_logging_runs_once():
    configure_logging(force=True)
    assert cvflow_logger._LOGGER_CONFIGURED

    # second call without force keeps the existing sinks
    configure_logging(level="ERROR")
    assert cvflow_logger._LOGGER_CONFIGURED
