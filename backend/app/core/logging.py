"""BizDesk - Console logging setup."""
import logging
import sys

_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio", "passlib", "httpx")


def configure_logging(level: str = "INFO") -> None:
    """Configure root console logging once at startup."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
