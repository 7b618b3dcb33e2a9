"""CLI entry point for tracelens."""

import argparse
import logging

import tracelens.io.logging_setup
import tracelens.settings
from tracelens.tui.app import TraceLensApp

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Interactive trace viewer state core")
    parser.add_argument(
        "--session-name",
        type=str,
        default="unnamed-session",
        help="Name used for the log file (default: unnamed-session)",
    )
    args = parser.parse_args()

    runtime = tracelens.io.logging_setup.configure(args.session_name)
    settings = tracelens.settings.load()
    logger.info("starting tracelens log=%s sync_hz=%s", runtime.file_path, settings.sync_hz)

    TraceLensApp(settings=settings).run()


if __name__ == "__main__":
    main()
