"""
Command line entry point: one-shot view with live follow, or the dashboard
"""

import argparse
import logging
import os
import signal
import sys
from dataclasses import dataclass
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from . import __version__
from .app import DashboardApp
from .filters import FilterSpec, matches
from .follow import FileFollower
from .monitor import Frame, RefreshLoop
from .parser import parse_line
from .render import format_entry, summary_lines
from .tracker import GrowthTracker

logger = logging.getLogger(__name__)

RULE = "━"


@dataclass(frozen=True)
class Settings:
    """Options collected from the command line"""
    path: str
    filters: FilterSpec
    dashboard: bool = False
    status_bar: bool = False
    clear_screen: bool = False
    count: bool = False
    verbose: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Settings":
        return cls(
            path=args.logfile,
            filters=FilterSpec(
                host=args.host,
                find=args.find,
                errors_only=args.errors,
                hide_assets=args.hide_assets,
                show_all=args.all,
                lines=max(args.lines, 0),
            ),
            dashboard=args.dashboard,
            status_bar=args.status,
            clear_screen=args.clear_screen,
            count=args.count,
            verbose=args.verbose,
        )


def configure_logging(verbose: bool) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )


# ═══════════════════════════════════════════════════════════════════════════════
# One-shot view + live follow
# ═══════════════════════════════════════════════════════════════════════════════

def print_summary(err: Console, settings: Settings, frame: Frame) -> None:
    err.rule(characters=RULE)
    for line in summary_lines(settings.path, settings.filters, frame, dashboard=False):
        err.print(line, highlight=False)
    err.rule(characters=RULE)


def run_follow(settings: Settings, out: Console, err: Console,
               follower: Optional[FileFollower] = None) -> None:
    """Print the last entries, then every new entry that passes the filters"""
    tracker = GrowthTracker(settings.path)
    tracker.scan()
    monitor = RefreshLoop(settings.path, settings.filters, tracker=tracker)
    frame = monitor.tick()

    if out.is_terminal or settings.count:
        print_summary(err, settings, frame)
    for entry in frame.visible:
        out.print(format_entry(entry), soft_wrap=True, highlight=False)

    # Follow from the end of the snapshot
    follower = follower or FileFollower(settings.path, monitor.offset)
    with follower:
        for line in follower.lines():
            entry = parse_line(line)
            if entry and matches(entry, settings.filters):
                out.print(format_entry(entry), soft_wrap=True, highlight=False)


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt


# ═══════════════════════════════════════════════════════════════════════════════
# Entry Point
# ═══════════════════════════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="caddy-monitor",
        description=f"Caddy Log Monitor v{__version__} - High-Visibility Caddy Logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Examples:
    %(prog)s /var/log/caddy/access.log
    %(prog)s -e -ha /var/log/caddy/access.log
    %(prog)s -d -s -h example.com /var/log/caddy/access.log

Dashboard Shortcuts:
    q       Quit
    r       Manual refresh
        """
    )

    parser.add_argument("logfile", help="Caddy JSON access log to watch")
    parser.add_argument("-l", "--lines", type=int, default=0,
                        help="number of previous lines to show")
    parser.add_argument("-h", "--host", default="",
                        help="only show logs for this domain or IP")
    parser.add_argument("-f", "--find", default="",
                        help="only show lines containing this string")
    parser.add_argument("-e", "--errors", action="store_true",
                        help="only show requests with status >= 400")
    parser.add_argument("-ha", "--hide-assets", action="store_true",
                        help="hides common asset types (.js, .css, images, etc)")
    parser.add_argument("-a", "--all", action="store_true",
                        help="show entire history and ignore asset filters")
    parser.add_argument("-s", "--status", action="store_true",
                        help="show system resource bar at bottom")
    parser.add_argument("-d", "--dashboard", action="store_true",
                        help="enable 1-second dashboard mode")
    parser.add_argument("-c", "--clear-screen", action="store_true",
                        help="clear terminal before starting and on exit")
    parser.add_argument("-co", "--count", action="store_true",
                        help="print the stats header even when output is not a terminal")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging to stderr")
    parser.add_argument("--help", action="help",
                        help="show this help menu")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_args(args)
    configure_logging(settings.verbose)

    out = Console()
    err = Console(stderr=True)

    if not os.path.isfile(settings.path):
        err.print(
            Text.assemble(("Error:", "red"), f" Log file '{settings.path}' not found."),
            soft_wrap=True,
        )
        return 1

    if settings.dashboard:
        DashboardApp(settings.path, settings.filters, status_bar=settings.status_bar).run()
        return 0

    signal.signal(signal.SIGTERM, _raise_interrupt)
    if out.is_terminal and settings.clear_screen:
        out.clear()
    try:
        run_follow(settings, out, err)
    except KeyboardInterrupt:
        logger.debug("Interrupted, shutting down")
    finally:
        if out.is_terminal:
            out.show_cursor(True)
            if settings.clear_screen:
                out.clear()
    return 0


if __name__ == "__main__":
    sys.exit(main())
