"""Library logger 'py_btk' with console output and an optional log file.

The logger level is INFO. enable_file_logging() adds a log file; with the logger lowered to
DEBUG it also records zero iterations and optimizer progress of long calibration runs.

Examples:
    ```python
    from py_ballistictk.logger import logger, enable_file_logging, disable_file_logging

    logger.info("Calibration started")

    enable_file_logging("calibration_debug.log")
    # ... run the fit ...
    disable_file_logging()
    ```
"""
import logging
from typing import Optional

__all__ = ('logger',
           'enable_file_logging',
           'disable_file_logging',
)

console_handler = logging.StreamHandler()
console_handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
console_handler.setLevel(logging.DEBUG)

logger: logging.Logger = logging.getLogger('py_btk')
logger.addHandler(console_handler)
logger.setLevel(logging.INFO)

file_handler: Optional[logging.FileHandler] = None


def enable_file_logging(filename: str = "debug.log") -> None:
    """Also write log records to `filename` (appending).

    The file handler accepts DEBUG, but records still pass the logger level first: call
    `logger.setLevel(logging.DEBUG)` to get debug messages in the file. A previously
    enabled log file is closed first.
    """
    global file_handler
    disable_file_logging()
    file_handler = logging.FileHandler(filename)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
    logger.addHandler(file_handler)


def disable_file_logging() -> None:
    """Stop writing to the log file and close it; a no-op when none is open."""
    global file_handler
    if file_handler is None:
        return
    logger.removeHandler(file_handler)
    file_handler.close()
    file_handler = None
