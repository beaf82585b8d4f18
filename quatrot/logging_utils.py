from typing import Dict, Literal
import logging
import sys
import traceback


class LogColors:
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'  # Reset color
    BOLD = '\033[1m'


PALETTES: Dict[str, Dict[int, str]] = {
    # rollout progress
    "demo": {
        logging.DEBUG: LogColors.OKCYAN,
        logging.INFO: LogColors.OKGREEN,
        logging.WARNING: LogColors.WARNING,
        logging.ERROR: LogColors.FAIL,
        logging.CRITICAL: LogColors.BOLD + LogColors.FAIL,
    },
    "system": {
        logging.DEBUG: LogColors.OKCYAN,
        logging.INFO: LogColors.OKCYAN,
        logging.WARNING: LogColors.WARNING,
        logging.ERROR: LogColors.FAIL,
        logging.CRITICAL: LogColors.BOLD + LogColors.FAIL,
    },
    "module": {
        logging.DEBUG: LogColors.OKCYAN,
        logging.INFO: LogColors.OKBLUE,
        logging.WARNING: LogColors.WARNING,
        logging.ERROR: LogColors.FAIL,
        logging.CRITICAL: LogColors.BOLD + LogColors.FAIL,
    },
}


class ColorFormatter(logging.Formatter):
    """ Logging formatter that colors each record by its level """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def __init__(self, palette: str = "system") -> None:
        if palette not in PALETTES:
            raise ValueError(f"Invalid formatter: {palette}")
        super().__init__(self.log_format)
        self.colors = PALETTES[palette]

    def format(self, record: logging.LogRecord) -> str:
        color = self.colors.get(record.levelno, LogColors.ENDC)
        message = super().format(record)
        return f"{color}{message}{LogColors.ENDC}"


def setup_logging(
    name=__name__,
    verbose: str = "INFO",
    formatter: Literal["demo", "system", "module"] = "system"
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(verbose)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(verbose)
    handler.setFormatter(ColorFormatter(formatter))

    logger.addHandler(handler)
    return logger


def log_exception(logger: logging.Logger, message: str):
    """
    Logs an error message along with the file name and line number where the error occurred.
    """
    _, exc_value, exc_traceback = sys.exc_info()
    tb = traceback.extract_tb(exc_traceback)
    if tb:
        # Get the last entry from the traceback
        filename, line, _, _ = tb[-1]
        logger.error(f"{message} - Exception occurred in {filename}, line {line}: {exc_value}")
    else:
        logger.error(f"{message} - {exc_value}")
