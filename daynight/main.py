#!/usr/bin/env python3
"""
Terminal world map with a real-time day/night overlay.
Uses braille characters for high-resolution rendering.

Interactive controls:
  Arrow keys: Pan
  +/=: Zoom in
  -: Zoom out
  r: Reset view
  n: Redraw the day/night overlay now
  w: Save current view as default
  q: Quit
"""

import argparse
import logging
import sys
from datetime import datetime

from daynight.config_manager import ConfigManager
from daynight.data_loader import flatten_segments, graticule_segments, load_shapefile
from daynight.map_app import DayNightApp

DEFAULT_LOG_FILE = "daynight.log"


def _setup_logging(log_file, debug):
    """Send log records to a file; the TUI owns the terminal."""
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s",
                                           datefmt="%Y-%m-%d %H:%M:%S"))
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG if debug else logging.INFO)


def _parse_time(value):
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 time: {value!r}") from None


def build_parser():
    parser = argparse.ArgumentParser(description='World map with a live day/night overlay')
    parser.add_argument('shapefile', nargs='?', default=None,
                        help='Natural Earth shapefile for borders/coastlines (default: graticule only)')
    parser.add_argument('--config', default=None,
                        help='TOML config file (default: daynight.toml or $DAYNIGHT_CONFIG)')
    parser.add_argument('--time', type=_parse_time, default=None,
                        help='Start the clock at this UTC time (ISO 8601)')
    parser.add_argument('--freeze', action='store_true',
                        help='Hold the clock at --time instead of running forward')
    parser.add_argument('--stride', type=int, default=None,
                        help='Overlay sample stride in pixels (overrides config)')
    parser.add_argument('--interval', type=int, default=None,
                        help='Overlay refresh interval in ms (overrides config)')
    parser.add_argument('--no-overlay', action='store_true',
                        help='Draw the map without the day/night overlay')
    parser.add_argument('--log-file', default=DEFAULT_LOG_FILE)
    parser.add_argument('--debug', action='store_true', help='Debug-level logging')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.freeze and args.time is None:
        parser.error("--freeze requires --time")

    _setup_logging(args.log_file, args.debug)
    log = logging.getLogger("daynight.main")

    def status(msg):
        sys.stdout.write(f'\r{msg}')
        sys.stdout.flush()

    config = ConfigManager(args.config)
    if args.stride is not None:
        config.set("overlay", "sample_stride", args.stride, save=False)
    if args.interval is not None:
        config.set("overlay", "refresh_interval_ms", args.interval, save=False)

    segments = graticule_segments()
    if args.shapefile:
        status('Loading map...')
        segments.extend(load_shapefile(args.shapefile))

    status('Starting UI...        \n')
    log.info("Starting with %d map segments, overlay %s", len(segments), config.overlay)

    app = DayNightApp(
        flat_data=flatten_segments(segments),
        config=config,
        custom_time=args.time,
        freeze=args.freeze,
        overlay_enabled=not args.no_overlay,
    )
    app.run()


if __name__ == '__main__':
    main()
