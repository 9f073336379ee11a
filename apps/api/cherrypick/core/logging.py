import logging
import os
import sys
from cherrypick.core.terminal_ui import TerminalUIHandler


def configure_logging() -> None:
    """Route all records through the terminal UI, plus plain output when DEBUG=true"""
    root = logging.getLogger()
    root.handlers.clear()

    terminal_handler = TerminalUIHandler()
    terminal_handler.setLevel(logging.INFO)
    root.setLevel(logging.INFO)
    root.addHandler(terminal_handler)

    if os.getenv("DEBUG", "false").lower() != "true":
        return

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    ))
    stream_handler.setLevel(logging.DEBUG)
    root.setLevel(logging.DEBUG)
    root.addHandler(stream_handler)
