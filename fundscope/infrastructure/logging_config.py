"""Process-wide logging setup."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Provider calls are chatty at DEBUG; keep third-party noise down.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
