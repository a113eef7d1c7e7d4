"""Debug logging and console setup for CLI"""

import logging
import os

from rich.console import Console

from utils.debug_console import create_debug_console, setup_debug_logger


def setup_logging(debug: bool, log_level: str, log_file: str) -> Console:
    """
    Configure logging and return the console the CLI prints to

    In debug mode the root logger writes DEBUG records to log_file and stderr,
    and console output is mirrored into the same file.

    Args:
        debug: Whether debug mode is enabled
        log_level: Level name used when debug is off
        log_file: Debug log path

    Returns:
        Console instance (either regular or debug-enabled)
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not debug:
        root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
        return Console()

    root_logger.setLevel(logging.DEBUG)
    log_path = os.path.abspath(log_file)
    file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    debug_logger = setup_debug_logger(log_path)
    debug_logger.debug("[CLI] ===== CLI SESSION STARTED =====")
    return create_debug_console(debug_enabled=True, debug_logger=debug_logger)
