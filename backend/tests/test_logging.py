import logging

from docverify import logging_config
from docverify.logging_config import configure_logging


def test_configure_logging_installs_one_handler():
    logger = logging.getLogger("docverify")
    before = list(logger.handlers)
    try:
        configure_logging("DEBUG")
        configure_logging("WARNING")

        added = [h for h in logger.handlers if h not in before]
        assert added == [logging_config._handler]
        assert logger.level == logging.WARNING
    finally:
        logger.removeHandler(logging_config._handler)
        logger.setLevel(logging.NOTSET)


def test_unknown_level_falls_back_to_info():
    logger = logging.getLogger("docverify")
    try:
        configure_logging("chatty")
        assert logger.level == logging.INFO
    finally:
        logger.removeHandler(logging_config._handler)
        logger.setLevel(logging.NOTSET)
