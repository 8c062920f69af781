#!/usr/bin/env python3
# Juicebar Entry Point
"""
Main entry point for the Juicebar application.

Usage:
    juicebar                     # Run with saved preferences
    juicebar --show-time         # Show the remaining time in the title
    juicebar --show-percentage   # Show the percentage in the title
    juicebar --debug             # Log at DEBUG level
"""

import argparse
import sys

from .core.logging_config import configure_logging
from .core.settings_manager import SettingsManager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Juicebar - battery status in the system tray",
        prog="juicebar",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write debug output to the log file",
    )
    display = parser.add_mutually_exclusive_group()
    display.add_argument(
        "--show-time",
        dest="show_time",
        action="store_const",
        const=True,
        help="Show the remaining time instead of the percentage",
    )
    display.add_argument(
        "--show-percentage",
        dest="show_time",
        action="store_const",
        const=False,
        help="Show the percentage instead of the remaining time",
    )
    return parser


def parse_arguments(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    """
    Parse command line arguments.

    Unknown arguments are returned so they can be passed on to GApplication.

    Args:
        argv: Command line arguments (sys.argv)

    Returns:
        Tuple of (parsed arguments, remaining arguments)
    """
    return build_parser().parse_known_args(argv[1:])


def _configure_logging(settings: SettingsManager, debug: bool) -> None:
    """
    Configure the logging system early in startup.

    This must run before the application modules are imported so they
    inherit the configured handlers.
    """
    configure_logging(
        log_level="DEBUG" if debug else settings.get("debug_log_level", "WARNING"),
        max_bytes=settings.get("debug_log_max_size_mb", 5) * 1024 * 1024,
        backup_count=settings.get("debug_log_max_files", 3),
    )


def main(argv: list[str] | None = None) -> int:
    """
    Application entry point.

    Returns:
        int: Exit code from the application (0 for success)
    """
    argv = list(sys.argv if argv is None else argv)
    args, remaining = parse_arguments(argv)

    settings = SettingsManager()
    _configure_logging(settings, args.debug)

    if args.show_time is not None:
        settings.set("show_time", args.show_time)

    from .app import JuicebarApp

    app = JuicebarApp(settings_manager=settings)
    return app.run([argv[0], *remaining])


if __name__ == "__main__":
    sys.exit(main())
