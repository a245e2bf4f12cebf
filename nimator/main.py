"""Entry point for the Nimator command line."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console

from nimator.config import settings
from nimator.engine.models import NimatorResult, NotificationLevel
from nimator.notifications import ConsoleNotifier, notify_all
from nimator.settings import NimatorSettings, SettingsError

console = Console()
logger = logging.getLogger("nimator")

EXIT_CODES = {
    NotificationLevel.OKAY: 0,
    NotificationLevel.WARNING: 0,
    NotificationLevel.ERROR: 1,
    NotificationLevel.CRITICAL: 2,
}


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def run_checks(settings_file: str, threshold: NotificationLevel | None = None) -> NimatorResult:
    """Load the settings document, run every layer once and notify."""
    try:
        nimator_settings = NimatorSettings.load(settings_file)
        engine = nimator_settings.build_engine()
        notifiers = nimator_settings.build_notifiers()
    except SettingsError as e:
        logger.error("%s", e)
        result = NimatorResult.critical(f"Nimator could not be configured: {e}")
        notify_all([ConsoleNotifier()], result)
        return result

    if threshold is not None:
        for notifier in notifiers:
            notifier.threshold = threshold

    result = engine.run_safe()
    delivered = notify_all(notifiers, result)
    logger.debug("Notifications delivered: %s", delivered)
    return result


def print_example() -> None:
    console.print(NimatorSettings.get_example().to_yaml(), markup=False, highlight=False)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Nimator layered health checks")
    sub = parser.add_subparsers(dest="command")

    run_parser = sub.add_parser("run", help="Run all layers once and notify")
    run_parser.add_argument(
        "--settings", default=settings.settings_file,
        help=f"Settings YAML file (default: {settings.settings_file})",
    )
    run_parser.add_argument(
        "--threshold", type=NotificationLevel.parse, default=None,
        help="Override every notifier's threshold (Okay, Warning, Error, Critical)",
    )

    sub.add_parser("example", help="Print an example settings file")

    args = parser.parse_args(argv)

    if args.command == "run":
        configure_logging()
        result = run_checks(args.settings, args.threshold)
        return EXIT_CODES[result.level]
    if args.command == "example":
        print_example()
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
