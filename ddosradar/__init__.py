#!/usr/bin/env python3
import sys
import os
import curses
import argparse
from datetime import timedelta

from .feed import CloudflareRadarFeed, FeedError, load_token
from .geo import CountryCentroids, project_lines
from .model import REGIONS, AttackCache, RegionSelector
from .settings import CONFIG, config_number, debug_log, init_config
from .ui import Snapshot, apply_theme, render_frame
from .canvas import load_world_outline
from .layout import Rect, compute_layout

KEY_ESC = 27
KEYS_PREVIOUS = (curses.KEY_LEFT, ord('h'))
KEYS_NEXT = (curses.KEY_RIGHT, ord('l'))
KEYS_QUIT = (KEY_ESC, ord('q'))
KEY_REFRESH = ord('r')
KEYS_LOG_SCROLL = {
    curses.KEY_UP: -1,
    curses.KEY_DOWN: 1,
    curses.KEY_PPAGE: -10,
    curses.KEY_NPAGE: 10,
}

DEFAULT_LOOKBACK = timedelta(minutes=360)

# how long getch() waits when auto refresh is on, so the loop can notice a stale cache
REFRESH_POLL_MS = 1000


class InputSurfaceError(RuntimeError):
    """Reading the next key failed; the terminal is unusable."""


class Dashboard:
    """
    The fetch → render → input loop and all of its state.

    The cache is refilled only when it is empty: with the default settings
    the feed is asked once, and again only after a failure, an empty
    answer, or a manual refresh (``r``). Setting ``refresh_interval``
    additionally drains the cache once it gets older than the interval.
    """

    def __init__(self, feed, resolver, lookback, refresh_interval=None, region=0, outline=()):
        self.feed = feed
        self.resolver = resolver
        self.lookback = lookback
        self.refresh_interval = refresh_interval or None
        self.outline = outline
        self.selector = RegionSelector(region)
        self.cache = AttackCache()
        self.segments = []
        self.status = ""
        self.log_offset = 0
        self.log_rows = 1
        self.running = True

    @property
    def state(self):
        return "NeedsData" if self.cache.is_empty() else "HasData"

    def _expire(self):
        if self.refresh_interval is None or self.cache.is_empty():
            return
        age = self.cache.age()
        if age is not None and age >= self.refresh_interval.total_seconds():
            debug_log(f"LOOP: cache is {int(age)}s old, draining for refresh")
            self.cache.drain()

    def ensure_data(self):
        """Fetch once if the cache is empty. Feed failures leave it empty; they never propagate."""
        self._expire()
        if not self.cache.is_empty():
            return
        try:
            records = self.feed.fetch(self.lookback)
        except FeedError as e:
            debug_log(f"FEED: {e.kind}: {e}")
            self.cache.drain()
            self.segments = []
            self.status = e.kind
            return
        self.cache.replace(records)
        self.log_offset = 0
        self.segments = project_lines(self.cache.records, self.resolver)
        self.status = "" if records else "feed returned no attacks"
        debug_log(f"FEED: {len(records)} attacks, {len(self.segments)} drawable")

    def snapshot(self):
        return Snapshot(
            records=self.cache.records,
            segments=tuple(self.segments),
            region_index=self.selector.index,
            lookback=self.lookback,
            status=self.status,
            fetched_at=self.cache.fetched_at,
            refresh_interval=self.refresh_interval,
            log_offset=self.log_offset,
        )

    def handle_key(self, k):
        """Route one key. Returns False once the loop should stop."""
        if k in KEYS_QUIT:
            self.running = False
        elif k in KEYS_PREVIOUS:
            self.selector.previous()
        elif k in KEYS_NEXT:
            self.selector.next()
        elif k in KEYS_LOG_SCROLL:
            last = max(0, len(self.cache) - self.log_rows)
            self.log_offset = max(0, min(self.log_offset + KEYS_LOG_SCROLL[k], last))
        elif k == KEY_REFRESH:
            self.cache.drain()
        return self.running

    def read_key(self, stdscr):
        k = stdscr.getch()
        if k == -1 and self.refresh_interval is None:
            # blocking read returned ERR
            raise InputSurfaceError("terminal input read failed")
        return k

    def step(self, stdscr):
        self.ensure_data()
        render_frame(stdscr, self.snapshot(), self.outline)
        h, w = stdscr.getmaxyx()
        self.log_rows = max(1, compute_layout(Rect(0, 0, w, h))["requests"].height - 2)
        k = self.read_key(stdscr)
        if k == -1:
            return True
        return self.handle_key(k)

    def run(self, stdscr):
        while self.step(stdscr):
            pass


def main(stdscr, args=None):
    curses.curs_set(0)
    stdscr.keypad(True)
    apply_theme(config_number("theme"), stdscr)

    lookback = timedelta(minutes=config_number("lookback_minutes", float))
    if lookback <= timedelta(0):
        debug_log(f"CONFIG: lookback_minutes={CONFIG['lookback_minutes']} is not positive, using {DEFAULT_LOOKBACK}")
        lookback = DEFAULT_LOOKBACK
    refresh_minutes = config_number("refresh_interval_minutes", float)
    refresh = timedelta(minutes=refresh_minutes) if refresh_minutes > 0 else None
    if refresh is not None:
        stdscr.timeout(REFRESH_POLL_MS)

    selector = RegionSelector()
    try:
        selector.select(str(CONFIG.get("region", "World")))
    except ValueError as e:
        debug_log(f"CONFIG: {e}, starting on {selector.region.label}")

    feed = CloudflareRadarFeed(load_token(), timeout=config_number("request_timeout", float))
    dashboard = Dashboard(
        feed,
        CountryCentroids.load(),
        lookback,
        refresh_interval=refresh,
        region=selector.index,
        outline=load_world_outline(),
    )
    debug_log(f"LOOP: started (lookback={lookback}, refresh={refresh}, region={selector.region.label})")
    dashboard.run(stdscr)
    debug_log("LOOP: quit")


# --------------------------------------------------
# Checks
# --------------------------------------------------
def check_python_version():
    if sys.version_info < (3, 8):
        print("Python 3.8 or newer is required.")
        sys.exit(1)

def _get_app_version():
    try:
        v_file = os.path.join(os.path.dirname(__file__), "VERSION")
        with open(v_file) as f:
            return f.read().strip()
    except OSError:
        return "0.0.0"

def _positive_int(value):
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive number")
    return n

def _region_label(value):
    try:
        RegionSelector().select(value)
    except ValueError:
        labels = ", ".join(r.label for r in REGIONS)
        raise argparse.ArgumentTypeError(f"unknown region {value!r} (choose from {labels})")
    return value

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Live DDoS attack map for the terminal (Cloudflare Radar)")
    parser.add_argument("--version", action="version", version=f'ddosradar {_get_app_version()}')
    parser.add_argument('--lookback', type=_positive_int, metavar='MINUTES', help='Attack window ending now')
    parser.add_argument('--refresh', type=int, metavar='MINUTES',
                        help='Refetch after this many minutes (0 = only when the cache is empty)')
    parser.add_argument('--region', type=_region_label, help='Region to focus at startup')
    parser.add_argument('--config', metavar='PATH', help='YAML config file to use instead of the default')
    return parser.parse_args(argv)

def apply_args(args):
    if args.lookback:
        CONFIG["lookback_minutes"] = args.lookback
    if args.refresh is not None:
        CONFIG["refresh_interval_minutes"] = max(0, args.refresh)
    if args.region:
        CONFIG["region"] = args.region

def check_and_show_terminal_size_then_exit():
    try:
        size = os.get_terminal_size()
        cols = size.columns
        rows = size.lines

        MIN_COLS = 60
        MIN_ROWS = 20

        if cols < MIN_COLS or rows < MIN_ROWS:
            print("┌────────────────────────────────────────────────────────────┐")
            print("│                  TERMINAL SIZE TOO SMALL                   │")
            print("├────────────────────────────────────────────────────────────┤")
            print(f"│  Current size:    {cols:4d} cols × {rows:3d} lines                    │")
            print("│                                                            │")
            print("│  Minimum required:                                         │")
            print(f"│     → At least {MIN_COLS} cols × {MIN_ROWS} lines                          │")
            print("│     → 120+ cols recommended for the map                    │")
            print("└────────────────────────────────────────────────────────────┘")
            print("\nPlease resize your terminal and try again.\n")
            sys.exit(1)

    except OSError:
        # not a TTY; curses will complain on its own
        pass


def cli_entry():
    """terminal command 'ddosradar' entry point"""
    check_python_version()
    args = parse_args()
    init_config(args.config)
    apply_args(args)

    # Check terminal size after args so --help works in small terminals
    check_and_show_terminal_size_then_exit()

    curses.wrapper(main, args)


if __name__ == "__main__":
    cli_entry()
