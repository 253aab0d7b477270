import logging

from channelviewer.logging_config import setup_logging


def test_setup_logging_writes_log_file(tmp_path):
    log_file = tmp_path / "viewer.log"
    setup_logging(level=logging.DEBUG, log_file=str(log_file))
    try:
        logging.getLogger("channelviewer.model.state").debug("resolution clamped")
        for handler in logging.getLogger("channelviewer").handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "Logging initialized" in text
        assert "channelviewer.model.state - DEBUG - resolution clamped" in text
    finally:
        logger = logging.getLogger("channelviewer")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()


def test_setup_logging_replaces_handlers():
    setup_logging()
    setup_logging()
    logger = logging.getLogger("channelviewer")
    try:
        assert len(logger.handlers) == 1
    finally:
        logger.handlers.clear()
