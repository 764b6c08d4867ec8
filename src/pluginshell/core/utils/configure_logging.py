# src/pluginshell/core/utils/configure_logging.py
import logging
import sys

from tqdm import tqdm


class LogWithTqdm(logging.Handler):
    """
    A logging handler that writes through `tqdm.write()` so that log records
    never break a progress bar a command is drawing.
    """

    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level, fallback):
    if isinstance(level, str):
        return getattr(logging, level.upper(), fallback)
    return level if level is not None else fallback


def configure_logger(general_level='WARNING', module_specific_levels=None, silenced_loggers=None):
    """
    Configures the root logger with a TQDM-friendly handler.

    Args:
        general_level: Level name or number for the root logger.
        module_specific_levels: Mapping of logger name to level, e.g. {"pluginshell.core.xngine": "DEBUG"}.
        silenced_loggers: Mapping of noisy logger names to a high level.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.WARNING))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))

    for name, level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))
