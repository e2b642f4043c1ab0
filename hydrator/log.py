"""Logging for hydrator."""

from typing import Dict, Union

from rich.console import Console
from typing_extensions import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogValue = Union[int, LogLevel]

# Logging levels compatible with logging module
_level_value = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}

_level_name = {v: k for k, v in _level_value.items()}
_level_print_style = {
    "DEBUG": "DEBUG",
    "INFO": "[cyan]INFO[/cyan]",
    "WARNING": "[yellow]WARNING[/yellow]",
    "ERROR": "[bold red]ERROR[/bold red]",
    "CRITICAL": "[bold underline red]CRITICAL[/bold underline red]",
}

DEFAULT_LEVEL = "WARNING"


def _get_level_int(level: LogValue) -> int:
    """Get the integer corresponding to the level string."""
    if isinstance(level, int):
        return level

    level_upper = level.upper()
    if level_upper not in _level_value:
        # ValueError rather than a HydratorError: exceptions.py imports this module
        raise ValueError(
            f"logging level {level} not supported, must be "
            "'DEBUG', 'INFO', 'WARNING', 'ERROR', or 'CRITICAL'"
        )
    return _level_value[level_upper]


# pylint: disable=too-few-public-methods
class LogHandler:
    """Write log messages at or above ``level`` to a rich console."""

    def __init__(self, console: Console, level: LogValue):
        self.level = _get_level_int(level)
        self.console = console

    def handle(self, level: int, level_name: str, message: str) -> None:
        """Output the message if it passes this handler's level."""
        if level < self.level:
            return
        self.console.log(
            _level_print_style.get(level_name, "unknown"),
            message,
            sep=": ",
        )


class Logger:
    """Minimal logger dispatching to named handlers ("console", "file")."""

    def __init__(self):
        self.handlers: Dict[str, LogHandler] = {}

    def _log(self, level: int, level_name: str, message: str) -> None:
        for handler in self.handlers.values():
            handler.handle(level, level_name, message)

    def is_enabled_for(self, level: LogValue) -> bool:
        """Whether any handler would emit a message at ``level``."""
        level = _get_level_int(level)
        return any(level >= handler.level for handler in self.handlers.values())

    def log(self, level: LogValue, message: str, *args) -> None:
        """Log (message) % (args) with given level"""
        if isinstance(level, str):
            level_name = level.upper()
            level = _get_level_int(level)
        else:
            level_name = _level_name.get(level, "unknown")
        self._log(level, level_name, message % args if args else message)

    def debug(self, message: str, *args) -> None:
        """Log (message) % (args) at debug level"""
        self._log(_level_value["DEBUG"], "DEBUG", message % args if args else message)

    def info(self, message: str, *args) -> None:
        """Log (message) % (args) at info level"""
        self._log(_level_value["INFO"], "INFO", message % args if args else message)

    def warning(self, message: str, *args) -> None:
        """Log (message) % (args) at warning level"""
        message = message % args if args else message
        self._log(_level_value["WARNING"], "WARNING", f"[white]{message}[/white]")

    def error(self, message: str, *args) -> None:
        """Log (message) % (args) at error level"""
        message = message % args if args else message
        self._log(_level_value["ERROR"], "ERROR", f"[white]{message}[/white]")

    def critical(self, message: str, *args) -> None:
        """Log (message) % (args) at critical level"""
        message = message % args if args else message
        self._log(_level_value["CRITICAL"], "CRITICAL", f"[white]{message}[/white]")


# Initialize hydrator's logger
log = Logger()


def set_logging_level(level: LogValue = DEFAULT_LEVEL) -> None:
    """Set the console logging level.

    Parameters
    ----------
    level : str
        The lowest priority level of logging messages to display. One of ``{'DEBUG', 'INFO',
        'WARNING', 'ERROR', 'CRITICAL'}`` (listed in increasing priority).
    """
    if "console" in log.handlers:
        log.handlers["console"].level = _get_level_int(level)


def set_logging_console(stderr: bool = True) -> None:
    """Set stdout or stderr as console output.

    Parameters
    ----------
    stderr : bool
        If False, logs are directed to stdout, otherwise to stderr.
    """
    if "console" in log.handlers:
        previous_level = log.handlers["console"].level
    else:
        previous_level = DEFAULT_LEVEL
    log.handlers["console"] = LogHandler(Console(stderr=stderr, log_path=False), previous_level)


def set_logging_file(fname: str, filemode: str = "a", level: LogValue = DEFAULT_LEVEL) -> None:
    """Write log messages to a file, independently of the console output.

    Parameters
    ----------
    fname : str
        Path to file to direct the output to.
    filemode : str
        'w' or 'a', defining if the file should be overwritten or appended.
    level : str
        One of ``{'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}``, set for the file
        independently of the console level.
    """
    if filemode not in ("w", "a"):
        raise ValueError("filemode must be either 'w' or 'a'")

    if "file" in log.handlers:
        try:
            log.handlers["file"].console.file.close()
        except OSError as error:
            log.warning("Log file could not be closed: %s", error)
        del log.handlers["file"]

    try:
        # pylint: disable=consider-using-with
        file = open(fname, filemode, encoding="utf-8")
    except OSError:
        log.warning("File %s could not be opened. Logging to file disabled.", fname)
        return

    log.handlers["file"] = LogHandler(Console(file=file, log_path=False), level)


# Set default logging output
set_logging_console()
