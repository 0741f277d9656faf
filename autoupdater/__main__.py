#!/usr/bin/env python3
import sys
import traceback
from types import TracebackType
from typing import Type

import loguru
from loguru import logger

from autoupdater.cli.main import cli
from autoupdater.utils.app_info import AppInfo


def handle_exception(
    exc_type: Type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> None:
    """
    Called through excepthook when the launcher fails with an uncaught
    exception. The error is logged and the process still exits with code 0.
    """

    # Ignore KeyboardInterrupt exceptions, for when running through the terminal
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger.error(
        "The updater has failed with an uncaught exception:\n"
        + "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    )
    sys.exit(0)


def formatter(record: "loguru.Record") -> str:
    """Custom formatter for loguru logger"""
    return (
        "[{level}]"
        "[{time:YYYY-MM-DD HH:mm:ss}]"
        "[{process.id}]"
        "[{thread.name}]"
        "[{module}]"
        "[{function}][{line}]"
        " : {message}\n{exception}"
    )


def setup_logging() -> None:
    # Set the log level from the presence (or absence) of a "DEBUG" file in the app storage folder
    debug_file_path = AppInfo().app_storage_folder / "DEBUG"
    debug_mode = debug_file_path.exists() and debug_file_path.is_file()

    # We have log_file (foo.log) and old_log_file (foo.old.log). If old_log_file exists,
    # remove it. If log_file exists, rename it to old_log_file.
    log_file = AppInfo().user_log_folder / (AppInfo().app_name + ".log")
    old_log_file = AppInfo().user_log_folder / (AppInfo().app_name + ".old.log")
    if old_log_file.exists() and old_log_file.is_file():
        old_log_file.unlink()
    if log_file.exists() and log_file.is_file():
        log_file.rename(old_log_file)

    # Remove the default stderr logger
    logger.remove()

    # Create the file logger
    logger.add(log_file, level="DEBUG" if debug_mode else "INFO", format=formatter)

    # Add a "WARNING" or higher stderr logger
    logger.add(sys.stderr, level="WARNING", format=formatter, colorize=False)


def main() -> None:
    sys.excepthook = handle_exception
    setup_logging()
    logger.info(f"Initializing AutoUpdater: {AppInfo().app_version}")
    # The launcher never reports failure through its exit code
    cli(standalone_mode=False)
    logger.info("Exiting updater!")
    sys.exit(0)


if __name__ == "__main__":
    main()
