import logging
from logging.handlers import RotatingFileHandler
from typing import Callable, Optional


class LightStateFilter(logging.Filter):
    """Stamp every record with the light state last reported by the device."""

    def __init__(self, light_state: Optional[Callable[[], Optional[bool]]] = None) -> None:
        super().__init__()
        self._light_state = light_state

    def filter(self, record: logging.LogRecord) -> bool:
        state = self._light_state() if self._light_state else None
        if state is None:
            record.light = "---"
        else:
            record.light = "ON " if state else "OFF"
        return True


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    light_state: Optional[Callable[[], Optional[bool]]] = None,
) -> None:
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(light)s %(name)s - %(message)s"
    )
    state_filter = LightStateFilter(light_state)

    # Console
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.addFilter(state_filter)
    logger.addHandler(ch)

    # Rotating file (the process is meant to run for months)
    if log_file:
        fh = RotatingFileHandler(
            log_file, maxBytes=2_000_000, backupCount=5
        )
        fh.setFormatter(fmt)
        fh.addFilter(state_filter)
        logger.addHandler(fh)

    # Silence noisy httpx request logging
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
