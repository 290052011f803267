import logging

from stockquiz.config import LOG_LEVEL


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure basic logging for the quiz core and return its logger."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("stockquiz")
