import asyncio
import logging
import os
import sys
from typing import Any, Dict, Optional

from .config import Settings

LOG_FORMAT = "%(asctime)s  %(levelname)-7s  %(name)-20s │ %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
REDACTED = "***"

logger = logging.getLogger(__name__)


class SecretRedactionFilter(logging.Filter):
    """Masks a secret in formatted log messages before they reach a handler."""

    def __init__(self, secret: str):
        super().__init__()
        self.secret = secret

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secret:
            return True
        message = record.getMessage()
        if self.secret in message:
            record.msg = message.replace(self.secret, REDACTED)
            record.args = None
        return True


def configure_logging(settings: Settings) -> None:
    """Basic console logging configuration, level from LOG_LEVEL."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL)

    if settings.AZURE_OPENAI_KEY is not None:
        secret = settings.AZURE_OPENAI_KEY.get_secret_value()
        for handler in root.handlers:
            if not any(isinstance(f, SecretRedactionFilter) for f in handler.filters):
                handler.addFilter(SecretRedactionFilter(secret))


def _log_uncaught(exc_type, exc_value, exc_tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_tb))


def install_excepthook() -> None:
    sys.excepthook = _log_uncaught


def install_loop_exception_handler(loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    """Log unhandled asyncio errors; terminate the process when one carries an exception."""
    loop = loop or asyncio.get_running_loop()

    def handler(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        exc = context.get("exception")
        message = context.get("message", "no message")
        if exc is None:
            logger.warning("asyncio: %s", message)
            return

        logger.critical("Unhandled asyncio error: %s", message, exc_info=exc)
        logging.shutdown()
        os._exit(1)

    loop.set_exception_handler(handler)
