import logging
import sys


logger = logging.getLogger("clonewatch")

_handler = None


def configure_logging(debug: bool):
    """
    Configures the clonewatch logger.

    Logs go to stderr so they don't interleave with the progress display on
    stdout. Debug mode adds logger names to every message.
    """
    global _handler

    if debug:
        log_level = logging.DEBUG
        fmt = "%(levelname)s %(name)s: %(message)s"
    else:
        log_level = logging.INFO
        fmt = "%(message)s"

    logger.setLevel(log_level)

    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        logger.addHandler(_handler)
    else:
        _handler.setStream(sys.stderr)
    _handler.setFormatter(logging.Formatter(fmt))
