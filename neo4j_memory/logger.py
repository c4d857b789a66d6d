from enum import Enum
import datetime
import inspect
import os
import sys
import traceback
from typing import Any, Dict, Optional


class LogLevel(str, Enum):
    """Log level enumeration."""
    DEBUG = "debug"
    INFO = "info"
    WARN = "warning"
    ERROR = "error"


class Logger:
    """Base logger interface."""
    def debug(self, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None) -> None:
        """Log a debug message."""
        pass

    def info(self, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None) -> None:
        """Log an info message."""
        pass

    def warn(self, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None) -> None:
        """Log a warning message."""
        pass

    def error(self, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None, exc_info: bool = False) -> None:
        """Log an error message."""
        pass

    def set_level(self, level: LogLevel) -> None:
        """Set the log level."""
        pass


class NullLogger(Logger):
    """Logger implementation that does nothing."""
    pass


class ConsoleLogger(Logger):
    """
    Logger implementation that logs to the console.

    Output goes to stderr: stdout belongs to the MCP stdio transport.
    """
    def __init__(self, level: LogLevel = LogLevel.INFO) -> None:
        self.level = level

    def set_level(self, level: LogLevel) -> None:
        """Set the log level."""
        self.level = level

    def debug(self, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None) -> None:
        """Log a debug message."""
        if self._should_log(LogLevel.DEBUG):
            self._log("DEBUG", message, payload, context)

    def info(self, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None) -> None:
        """Log an info message."""
        if self._should_log(LogLevel.INFO):
            self._log("INFO", message, payload, context)

    def warn(self, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None) -> None:
        """Log a warning message."""
        if self._should_log(LogLevel.WARN):
            self._log("WARNING", message, payload, context)

    def error(self, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None, exc_info: bool = False) -> None:
        """Log an error message."""
        if self._should_log(LogLevel.ERROR):
            self._log("ERROR", message, payload, context)
            if exc_info:
                print(traceback.format_exc(), file=sys.stderr)

    def _should_log(self, message_level: LogLevel) -> bool:
        """Check if a message should be logged based on the current log level."""
        levels = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]
        return levels.index(message_level) >= levels.index(self.level)

    def _log(self, level: str, message: str, payload: Optional[Any] = None, context: Optional[Dict[str, Any]] = None) -> None:
        """Internal method to format and print log messages."""
        timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        # Copy so callers can reuse their context dicts
        ctx = dict(context or {})

        if "caller" not in ctx:
            frame = inspect.currentframe()
            if frame:
                try:
                    caller_frame = frame.f_back
                    if caller_frame and caller_frame.f_back:
                        caller_frame = caller_frame.f_back  # Skip _log and the actual log method
                        filename = os.path.basename(caller_frame.f_code.co_filename)
                        lineno = caller_frame.f_lineno
                        function = caller_frame.f_code.co_name
                        ctx["caller"] = f"{filename}:{lineno} ({function})"
                finally:
                    del frame  # Avoid reference cycles

        context_str = ""
        if ctx:
            context_items = [f"{k}={v}" for k, v in ctx.items()]
            context_str = f" [{', '.join(context_items)}]"

        if payload:
            print(f"{timestamp} {level}: {message}{context_str}", payload, file=sys.stderr)
        else:
            print(f"{timestamp} {level}: {message}{context_str}", file=sys.stderr)


def get_logger(level: Optional[LogLevel] = None) -> Logger:
    """Get a logger instance."""
    logger = ConsoleLogger()
    if level is not None:
        logger.set_level(level)
    return logger
