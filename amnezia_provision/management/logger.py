import logging
import sys

from amnezia_provision.management.settings import get_settings


ROOT_LOGGER_NAME = "amnezia_provision"

_COLORS = {
    "black": "\033[30m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
}
_RESET = "\033[0m"

_logger_colors: dict[str, str] = {}


class ColoredNameFormatter(logging.Formatter):
    def __init__(self, use_color: bool):
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color_code = _COLORS.get(_logger_colors.get(record.name, ""), "")
        if not self.use_color or not color_code:
            return message
        return message.replace(record.name, f"{color_code}{record.name}{_RESET}", 1)


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColoredNameFormatter(use_color=sys.stderr.isatty()))
        root.addHandler(handler)
        # component records are printed once, by this handler only
        root.propagate = False
    return root


def configure_logger(name: str, color: str = "white") -> logging.Logger:
    _root_logger()
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    logger.setLevel(get_settings().log_level.upper())
    _logger_colors[logger.name] = color
    return logger


def component_loggers() -> list[logging.Logger]:
    return [
        logger
        for name, logger in logging.root.manager.loggerDict.items()
        if name.startswith(f"{ROOT_LOGGER_NAME}.") and isinstance(logger, logging.Logger)
    ]


def set_log_level(level: str) -> None:
    for logger in component_loggers():
        logger.setLevel(level.upper())
