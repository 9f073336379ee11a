"""
Terminal output for the cherry-pick backend.
Renders log records, batch logs and startup panels with rich.
"""
import logging
from typing import Optional, Dict, Iterable
from enum import Enum
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.table import Table
from rich import box
import sys


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class TerminalUI:
    """Plain terminal interface for backend events"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(file=sys.stdout)
        self.colors = {
            LogLevel.DEBUG: "dim cyan",
            LogLevel.INFO: "white",
            LogLevel.SUCCESS: "green",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        self.prefixes = {
            LogLevel.DEBUG: "[DEBUG]",
            LogLevel.INFO: "[INFO]",
            LogLevel.SUCCESS: "[SUCCESS]",
            LogLevel.WARNING: "[WARNING]",
            LogLevel.ERROR: "[ERROR]",
        }

    def log(self, message: str, level: LogLevel = LogLevel.INFO, component: Optional[str] = None):
        prefix = self.prefixes[level]
        if component:
            formatted_message = f"{prefix} [{component}] {message}"
        else:
            formatted_message = f"{prefix} {message}"
        self.console.print(Text(formatted_message, style=self.colors[level]))

    def success(self, message: str, component: Optional[str] = None):
        self.log(message, LogLevel.SUCCESS, component)

    def panel(self, content: str, title: Optional[str] = None, style: str = "blue"):
        """Display content in a rounded panel"""
        self.console.print(
            Panel(content, title=title, border_style=style, box=box.ROUNDED, padding=(1, 2))
        )

    def status_line(self, items: Dict[str, str]):
        """Display key/value pairs as two aligned rows"""
        table = Table.grid(padding=1)
        for _ in items:
            table.add_column()
        table.add_row(*[Text(key, style="dim cyan") for key in items])
        table.add_row(*[Text(value, style="white") for value in items.values()])
        self.console.print(table)

    def batch_log(self, lines: Iterable[str], success: bool):
        """Print an execution batch log, colored by outcome"""
        style = "green" if success else "red"
        title = "Cherry-pick batch" if success else "Cherry-pick batch (failed)"
        self.panel("\n".join(lines) or "(no output)", title=title, style=style)


# Global instance
ui = TerminalUI()


class TerminalUIHandler(logging.Handler):
    """Logging handler that renders records through TerminalUI"""

    level_map = {
        logging.DEBUG: LogLevel.DEBUG,
        logging.INFO: LogLevel.INFO,
        logging.WARNING: LogLevel.WARNING,
        logging.ERROR: LogLevel.ERROR,
        logging.CRITICAL: LogLevel.ERROR,
    }

    def __init__(self, terminal: Optional[TerminalUI] = None):
        super().__init__()
        self.ui = terminal or ui

    def emit(self, record):
        try:
            level = self.level_map.get(record.levelno, LogLevel.INFO)
            component = record.name if record.name != "root" else None
            self.ui.log(record.getMessage(), level, component)
        except Exception:
            self.handleError(record)
