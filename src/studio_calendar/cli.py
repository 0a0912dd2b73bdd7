from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from .bootstrap import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Studio Calendar command line interface.")
    parser.add_argument("--log-level", default=None, help="Override STUDIO_CALENDAR_LOG_LEVEL (DEBUG, INFO, ...).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gui_parser = subparsers.add_parser("gui", help="Launch the desktop calendar.")
    gui_parser.add_argument("--email", default=None, help="Prefill the sign-in email.")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    log_path = configure_logging(level=args.log_level)
    logging.getLogger(__name__).info("Studio Calendar CLI starting (log file %s)", log_path)

    if args.command == "gui":
        from .ui.app import run_gui

        return run_gui(email=args.email)
    parser.print_help()  # pragma: no cover - argparse enforces choices
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
