from __future__ import annotations

import argparse
import logging
import signal
import threading

from pydantic import ValidationError

from domcapture.config.loader import ConfigLoader
from domcapture.config.schema import RunConfig
from domcapture.core.actions import ACTION_NAMES, parse_action
from domcapture.core.exceptions import NavigationError
from domcapture.core.metadata import CaptureSession
from domcapture.core.runner import CaptureRunner

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CAPTURE_FAILED = 1
EXIT_SETUP_FAILED = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="domcapture",
        description="Screenshot a page each time a user action visibly changes its DOM",
    )
    parser.add_argument("url", nargs="?", default="https://example.com", help="Page to load")
    parser.add_argument("action", nargs="?", choices=ACTION_NAMES, help="Action to perform after loading")
    parser.add_argument("argument", nargs="?", help="Action argument: x,y for click, text, key name or pixels")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--max-snapshots", type=int, help="Maximum screenshots per session")
    parser.add_argument("--duration-ms", type=int, help="Session duration bound in milliseconds")
    parser.add_argument("--debounce-ms", type=int, help="Delay between activity checks in milliseconds")
    parser.add_argument("--output-dir", help="Directory for screenshots and metadata")
    parser.add_argument("--label", help="Suffix for the first screenshot file name")
    parser.add_argument("--browser", help="firefox or chrome")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--verbose", action="store_true", help="Log ignored ticks and malformed events")
    return parser


def resolve_config(args: argparse.Namespace) -> RunConfig:
    return ConfigLoader.resolve(
        args.config,
        capture={
            "max_snapshots": args.max_snapshots,
            "max_duration_ms": args.duration_ms,
            "debounce_ms": args.debounce_ms,
            "output_dir": args.output_dir,
            "label": args.label,
        },
        browser={"browser": args.browser, "headless": False if args.headed else None},
    )


def interrupt_handler(runner: CaptureRunner, cancel: threading.Event):
    """Ctrl-C aborts while the page is loading and ends the session cleanly once capture runs."""

    def handle(signum, frame) -> None:
        if not runner.capturing.is_set():
            raise KeyboardInterrupt
        cancel.set()

    return handle


def print_summary(session: CaptureSession, report_path) -> None:
    rule = "=" * 50
    print(f"\n{rule}\nSUMMARY\n{rule}")
    print(f"Status: {session.status}")
    print(f"Screenshots: {len(session.snapshots)}")
    print(f"Total DOM mutations: {session.total_mutation_count}")
    print(f"Significant DOM mutations: {session.significant_mutation_count}")
    if session.snapshots:
        print(f"Files: {session.snapshots[0].file} - {session.snapshots[-1].file}")
    print(f"Metadata: {report_path}")
    if session.error is not None:
        print(f"Error: {session.error}")
    print(rule)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    try:
        config = resolve_config(args)
        action = parse_action(args.action, args.argument)
    except (ValidationError, ValueError, OSError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_SETUP_FAILED

    capture = config.capture
    logger.info("URL: %s", args.url)
    logger.info("Action: %s", action.describe() if action else "navigate only")
    logger.info("Max: %d screenshots / %dms", capture.max_snapshots, capture.max_duration_ms)

    cancel = threading.Event()
    runner = CaptureRunner(config)
    previous_handler = signal.signal(signal.SIGINT, interrupt_handler(runner, cancel))
    try:
        result = runner.run(args.url, action, cancel=cancel)
    except NavigationError as exc:
        logger.error("Navigation failed: %s", exc)
        return EXIT_SETUP_FAILED
    except KeyboardInterrupt:
        logger.error("Interrupted before capture started")
        return EXIT_INTERRUPTED
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    print_summary(result.session, result.report_path)
    return EXIT_OK if result.session.completed else EXIT_CAPTURE_FAILED
