"""Rich console that mirrors CLI output into the debug log.

When itd-cli runs with --debug, everything printed to the terminal is also
written as plain text to the debug log, interleaved with the client's own log
records (refresh attempts, request failures), so a single file shows what
the operator saw and why.
"""

import io
import logging
import re
from typing import Optional

from rich.console import Console as RichConsole

# CSI and single-character escape sequences
ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


class DebugCapturingConsole(RichConsole):
    """
    Rich Console that also logs a plain-text copy of each print.

    Terminal output keeps its colors and tables; the debug log receives the
    same content rendered without markup, prefixed with "[CONSOLE] ".
    """

    def __init__(self, debug_logger: Optional[logging.Logger] = None, *args, **kwargs):
        """
        Initialize the mirroring console.

        Args:
            debug_logger: Logger receiving the plain-text copies
            *args, **kwargs: Passed through to Rich Console
        """
        super().__init__(*args, **kwargs)
        self.debug_logger = debug_logger
        self._log_prefix = "[CONSOLE] "

    def print(self, *objects, **kwargs):
        """
        Print to the terminal, then log the same output as plain text.

        Blank output (spacer lines) is not logged.
        """
        # Normal Rich output first
        super().print(*objects, **kwargs)

        # Mirror only when someone is listening at DEBUG
        if self.debug_logger and self.debug_logger.isEnabledFor(logging.DEBUG):
            plain_text = self.render_plain(*objects, **kwargs)
            if plain_text.strip():
                self.debug_logger.debug(f"{self._log_prefix}{plain_text}")

    def render_plain(self, *objects, **kwargs) -> str:
        """
        Render objects the way print() would, without markup or ANSI codes.

        Args:
            *objects: Objects passed to print()
            **kwargs: Keyword arguments passed to print()

        Returns:
            Plain text with trailing whitespace removed
        """
        buffer = io.StringIO()

        # Throwaway console with terminal features off and the same width,
        # so tables wrap the way they did on screen
        temp_console = RichConsole(
            file=buffer,
            force_terminal=False,
            width=self.width,
            legacy_windows=False
        )
        temp_console.print(*objects, **kwargs)

        # Strip any escape codes that survived, keep line structure
        return ANSI_ESCAPE.sub('', buffer.getvalue()).rstrip()


def create_debug_console(debug_enabled: bool = False,
                         debug_logger: Optional[logging.Logger] = None) -> RichConsole:
    """
    Create the console the CLI prints to.

    Args:
        debug_enabled: Whether --debug was given
        debug_logger: Logger for mirrored output

    Returns:
        DebugCapturingConsole in debug mode with a logger, plain Console otherwise
    """
    if debug_enabled and debug_logger:
        return DebugCapturingConsole(debug_logger=debug_logger)
    return RichConsole()


def setup_debug_logger(log_file: str) -> logging.Logger:
    """
    Set up the dedicated logger for mirrored console output.

    Args:
        log_file: Debug log path, shared with the root logger's file handler

    Returns:
        Configured "itd.console" logger
    """
    logger = logging.getLogger("itd.console")
    logger.setLevel(logging.DEBUG)

    # Running setup twice must not duplicate every line
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    # Append, so earlier CLI sessions stay in the file
    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
    logger.addHandler(file_handler)

    # Root already writes to the same file
    logger.propagate = False

    return logger
