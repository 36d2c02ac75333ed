"""Command line entry point: ``python -m uplinkmon`` or ``uplinkmon``."""

from __future__ import annotations

import argparse
import sys

from uplinkmon import __version__, host
from uplinkmon.graph import TerminalGraph, TextReport, format_candidates
from uplinkmon.log import CHART_CONSOLE_LEVEL, setup_logging
from uplinkmon.monitor import Monitor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uplinkmon",
        description="Download/upload rate and totals for the primary network interface.",
    )
    parser.add_argument("--interface", default=None,
                        help="Monitor this interface (name or description) instead of the best match")
    parser.add_argument("--list", action="store_true", dest="list_candidates",
                        help="List candidate interfaces in priority order and exit")
    parser.add_argument("--text", action="store_true",
                        help="Print one line per second instead of drawing a chart")
    parser.add_argument("--window", type=float, default=60.0,
                        help="Rolling history window in seconds (default: 60)")
    parser.add_argument("--title", default=None,
                        help="Override chart title")
    parser.add_argument("--no-legend", action="store_true",
                        help="Hide the legend labels")
    parser.add_argument(
        "--frame",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Show chart frame border (default: off)",
    )
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: WARNING)")
    parser.add_argument("--log-file", default=None,
                        help="Write log lines here instead of stderr "
                             "(the chart view only shows errors on stderr)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def list_candidates(monitor: Monitor) -> None:
    monitor.refresh()
    print(f"Platform: {host.platform_info(monitor.platform)}")
    print("Candidate interfaces (* = selected):")
    print(format_candidates(monitor.candidates, monitor.active))


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    chart = not (args.text or args.list_candidates)
    setup_logging(args.log_level, args.log_file,
                  console_floor=CHART_CONSOLE_LEVEL if chart else None)

    if args.list_candidates:
        list_candidates(Monitor(preferred=args.interface))
        return 0

    if args.text:
        view = TextReport()
        view.on_status(f"platform {host.platform_info()}")
    else:
        view = TerminalGraph(
            window=args.window,
            title=args.title,
            legend=not args.no_legend,
            frame=args.frame,
            platform_info=host.platform_info(),
        )

    monitor = Monitor(preferred=args.interface, listener=view)
    try:
        if isinstance(view, TerminalGraph):
            with view:
                monitor.run()
        else:
            monitor.run()
    except KeyboardInterrupt:
        pass
    finally:
        monitor.stop()
        if not args.text:
            print("\nExiting...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
