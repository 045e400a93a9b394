import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_handler: logging.Handler | None = None


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the ``docverify`` logger tree.

    Safe to call more than once; the handler is only installed the first time.
    """
    global _handler
    logger = logging.getLogger("docverify")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    if _handler not in logger.handlers:
        logger.addHandler(_handler)
