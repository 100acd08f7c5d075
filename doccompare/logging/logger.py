import logging
import sys

# Third-party loggers that drown out pipeline logs below WARNING.
_NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "openai", "pdfminer", "psycopg.pool")


class Log:
    """Centralized logging for the document pipeline."""

    _logger: logging.Logger = logging.getLogger("doccompare")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level, attach one stdout handler and quiet chatty libraries."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)
        if cls._logger.level > logging.DEBUG:
            for name in _NOISY_LOGGERS:
                logging.getLogger(name).setLevel(logging.WARNING)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
