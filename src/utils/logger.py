"""
Category logger

One process-wide Logger prints compact, colored lines grouped by category:

    [14:23:45] SESSION   ✓ Animation session started
                         ├─ pid: 4242
                         └─ brightness: 80

Modules bind a category once at import time:

    log = get_logger().for_category(LogCategory.SESSION)
    log.info("Animation session started", pid=4242)

The animation runtime child reconfigures the same instance to write plain
lines to stderr (its stdout carries the session protocol); the server reads
those lines and logs them again under its own timestamp.
"""

import sys
from datetime import datetime
from typing import Dict, List, Optional, TextIO, Tuple
from models.enums import LogLevel, LogCategory


# === ANSI COLORS ===
class Colors:
    RESET = '\033[0m'
    DIM = '\033[2m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    WHITE = '\033[37m'

    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_MAGENTA = '\033[95m'
    BRIGHT_CYAN = '\033[96m'
    BRIGHT_WHITE = '\033[97m'


CATEGORY_COLORS: Dict[LogCategory, str] = {
    LogCategory.CONFIG: Colors.CYAN,
    LogCategory.HARDWARE: Colors.BRIGHT_BLUE,
    LogCategory.ANIMATION: Colors.BRIGHT_YELLOW,
    LogCategory.SESSION: Colors.YELLOW,
    LogCategory.PROTOCOL: Colors.MAGENTA,
    LogCategory.SANDBOX: Colors.BRIGHT_MAGENTA,
    LogCategory.API: Colors.BRIGHT_GREEN,
    LogCategory.AUTH: Colors.GREEN,
    LogCategory.SOCKETIO: Colors.BRIGHT_CYAN,
    LogCategory.EVENT: Colors.BRIGHT_MAGENTA,
    LogCategory.SYSTEM: Colors.BRIGHT_WHITE,
}

# Level -> (rank, symbol, color)
LEVEL_STYLES: Dict[LogLevel, Tuple[int, str, str]] = {
    LogLevel.DEBUG: (0, '·', Colors.DIM),
    LogLevel.INFO: (1, '✓', Colors.GREEN),
    LogLevel.WARN: (2, '⚠', Colors.YELLOW),
    LogLevel.ERROR: (3, '✗', Colors.RED),
}

CATEGORY_WIDTH = 9
DETAIL_INDENT = " " * 11


# === CORE LOGGER ===
class Logger:
    """
    Structured logger with compact output format

    Details come from the `details` list and from keyword arguments; an
    `exception=` keyword is rendered as "Type: message". Multi-line messages
    (tracebacks relayed from a runtime) keep their first line as the message
    and print the rest as details.
    """

    def __init__(
        self,
        min_level: LogLevel = LogLevel.INFO,
        use_colors: bool = True,
        stream: Optional[TextIO] = None,
        prefix: Optional[str] = None,
        timestamps: bool = True,
    ):
        """
        Args:
            min_level: Minimum log level to display
            use_colors: Enable ANSI color codes
            stream: Output stream (default: sys.stdout at write time)
            prefix: Process tag printed before the category ("runtime")
            timestamps: Print [HH:MM:SS]; off when another process re-logs the line
        """
        self.min_level = min_level
        self.use_colors = use_colors
        self.stream = stream
        self.prefix = prefix
        self.timestamps = timestamps

    def is_enabled(self, level: LogLevel) -> bool:
        return LEVEL_STYLES[level][0] >= LEVEL_STYLES[self.min_level][0]

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{Colors.RESET}" if self.use_colors else text

    def _head(self, category: LogCategory, level: LogLevel, message: str) -> str:
        _, symbol, level_color = LEVEL_STYLES[level]
        parts = []
        if self.timestamps:
            parts.append(datetime.now().strftime('[%H:%M:%S]'))
        if self.prefix:
            parts.append(self._paint(self.prefix, Colors.DIM))
        parts.append(self._paint(category.name.ljust(CATEGORY_WIDTH), CATEGORY_COLORS.get(category, Colors.WHITE)))
        parts.append(self._paint(symbol, level_color))
        parts.append(self._paint(message, level_color))
        return " ".join(parts)

    @staticmethod
    def _detail_lines(details: Optional[list], kwargs: dict) -> List[str]:
        lines = [str(d) for d in details or []]
        for key, value in kwargs.items():
            if key == "exception" and isinstance(value, BaseException):
                lines.append(f"{type(value).__name__}: {value}")
            else:
                lines.append(f"{key}: {value}")
        return lines

    def _write(self, line: str) -> None:
        print(line, file=self.stream or sys.stdout, flush=True)

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[list] = None,
        **kwargs
    ):
        """
        Example:
            logger.log(LogCategory.SESSION, "Animation session started", pid=4242)
        """
        if not self.is_enabled(level):
            return

        first, *rest = str(message).splitlines() or [""]
        self._write(self._head(category, level, first))

        lines = rest + self._detail_lines(details, kwargs)
        for i, line in enumerate(lines):
            branch = "└─" if i == len(lines) - 1 else "├─"
            self._write(f"{DETAIL_INDENT}{self._paint(branch, Colors.DIM)} {line}")

    def debug(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.DEBUG, **kw)
    def info(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.INFO, **kw)
    def warn(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.WARN, **kw)
    def error(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.ERROR, **kw)

    def for_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self, category)


class BoundLogger:
    """Logger bound to a default category"""

    def __init__(self, base: Logger, category: LogCategory):
        self._base = base
        self._category = category

    def log(self, message: str, level: LogLevel = LogLevel.INFO, category: Optional[LogCategory] = None, **kw):
        self._base.log(category or self._category, message, level, **kw)

    def debug(self, message: str, **kw): self.log(message, LogLevel.DEBUG, **kw)
    def info(self, message: str, **kw): self.log(message, LogLevel.INFO, **kw)
    def warn(self, message: str, **kw): self.log(message, LogLevel.WARN, **kw)
    def error(self, message: str, **kw): self.log(message, LogLevel.ERROR, **kw)

    def with_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self._base, category)


# === Global instance ===
_logger = Logger()


def get_logger() -> Logger:
    return _logger


def get_category_logger(category: LogCategory) -> BoundLogger:
    return _logger.for_category(category)


def configure_logger(
    min_level: LogLevel = LogLevel.INFO,
    use_colors: bool = True,
    stream: Optional[TextIO] = None,
    prefix: Optional[str] = None,
    timestamps: bool = True,
):
    """
    Reconfigure the process-wide logger in place.

    Bound loggers created at import time point at the same instance, so the
    change reaches every module.
    """
    _logger.min_level = min_level
    _logger.use_colors = use_colors
    _logger.stream = stream
    _logger.prefix = prefix
    _logger.timestamps = timestamps
