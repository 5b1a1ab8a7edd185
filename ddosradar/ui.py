import curses
import time
from collections import namedtuple

from .canvas import LAYER_ATTACK, LAYER_MAP, BrailleCanvas, draw_world
from .layout import Rect, compute_layout
from .model import REGIONS

# Everything the renderer is allowed to see for one frame
Snapshot = namedtuple("Snapshot", [
    "records", "segments", "region_index", "lookback", "status", "fetched_at", "refresh_interval",
    "log_offset",
], defaults=(0,))

# --------------------------------------------------
# 🎨 Themes & Colors
# --------------------------------------------------
# Curses color pair IDs (1-based because 0 is reserved)
CP_HEADER = 1   # Panel titles, selected region
CP_ACCENT = 2   # Key shortcuts, attack arcs
CP_TEXT = 3     # Normal body text
CP_WARN = 4     # Feed failures
CP_BORDER = 5   # Borders
CP_MAP = 6      # Coastlines

THEMES = [
    {
        "name": "🟢 Radar (Default)",
        "colors": {
            CP_HEADER: (curses.COLOR_CYAN, -1),
            CP_ACCENT: (curses.COLOR_RED, -1),
            CP_TEXT: (curses.COLOR_WHITE, -1),
            CP_WARN: (curses.COLOR_YELLOW, -1),
            CP_BORDER: (curses.COLOR_BLUE, -1),
            CP_MAP: (curses.COLOR_GREEN, -1),
        },
        "colors_256": {
            CP_HEADER: (45, 234),    # Turquoise2 on DarkGrey
            CP_ACCENT: (203, 234),   # IndianRed
            CP_TEXT: (255, 234),     # White
            CP_WARN: (226, 234),     # Yellow
            CP_BORDER: (33, 234),    # DodgerBlue1
            CP_MAP: (71, 234),       # DarkSeaGreen
        },
    },
    {
        "name": "🔸 Gruvbox Dark (Retro)",
        "colors": {
            CP_HEADER: (curses.COLOR_YELLOW, -1),
            CP_ACCENT: (curses.COLOR_RED, -1),
            CP_TEXT: (curses.COLOR_WHITE, -1),
            CP_WARN: (curses.COLOR_RED, -1),
            CP_BORDER: (curses.COLOR_YELLOW, -1),
            CP_MAP: (curses.COLOR_GREEN, -1),
        },
        "colors_256": {
            CP_HEADER: (214, 235),   # Orange1 on Gruvbox BG
            CP_ACCENT: (167, 235),   # IndianRed
            CP_TEXT: (223, 235),     # Cream
            CP_WARN: (208, 235),     # OrangeRed
            CP_BORDER: (246, 235),   # Grey
            CP_MAP: (142, 235),      # Gruvbox green
        },
    },
]

def apply_theme(index, stdscr=None):
    """Initializes color pairs for THEMES[index], using 256 colors if available."""
    if not curses.has_colors():
        return
    theme = THEMES[index % len(THEMES)]
    curses.start_color()
    use_256 = curses.COLORS >= 256
    if not use_256:
        try:
            curses.use_default_colors()
        except curses.error:
            pass
    color_map = theme["colors_256"] if use_256 else theme["colors"]
    for pair_id, (fg, bg) in color_map.items():
        try:
            curses.init_pair(pair_id, fg, bg)
        except curses.error:
            pass
    if stdscr is not None:
        stdscr.bkgdset(' ', curses.color_pair(CP_TEXT))


def _addstr(win, y, x, text, attr=0):
    """addstr that truncates to the window and never raises on the last cell."""
    h, w = win.getmaxyx()
    if y < 0 or y >= h or x >= w:
        return
    try:
        win.addnstr(y, x, text, w - x, attr)
    except curses.error:
        pass


def _panel(stdscr, rect, title):
    """Bordered sub-window for one layout rect, or None when it is too small to draw."""
    if rect.width < 3 or rect.height < 3:
        return None
    try:
        win = stdscr.derwin(rect.height, rect.width, rect.y, rect.x)
    except curses.error:
        return None
    border = curses.color_pair(CP_BORDER)
    win.attron(border)
    win.box()
    win.attroff(border)
    _addstr(win, 0, 2, f" {title} ", curses.color_pair(CP_HEADER) | curses.A_BOLD)
    return win


def draw_navbar(stdscr, rect, region_index):
    win = _panel(stdscr, rect, "Regions")
    if win is None:
        return
    h, w = win.getmaxyx()

    # wrap labels into lines of (index, x, label)
    lines, line, x = [], [], 1
    for i, region in enumerate(REGIONS):
        label = f" {region.label} "
        if line and x + len(label) > w - 1:
            lines.append(line)
            line, x = [], 1
        line.append((i, x, label))
        x += len(label) + 1
    lines.append(line)

    # scroll so the line holding the selected region is on screen
    visible = max(1, h - 2)
    sel_line = next(n for n, ln in enumerate(lines) if any(i == region_index for i, _, _ in ln))
    first = max(0, sel_line - visible + 1)

    for y, ln in enumerate(lines[first:first + visible], 1):
        for i, x, label in ln:
            if i == region_index:
                attr = curses.color_pair(CP_HEADER) | curses.A_REVERSE | curses.A_BOLD
            else:
                attr = curses.color_pair(CP_TEXT)
            _addstr(win, y, x, label, attr)
    if first > 0:
        _addstr(win, 0, w - 3, "▲", curses.color_pair(CP_ACCENT))
    if first + visible < len(lines):
        _addstr(win, h - 1, w - 3, "▼", curses.color_pair(CP_ACCENT))


def draw_requests(stdscr, rect, records, offset=0):
    win = _panel(stdscr, rect, f"Attacks ({len(records)})")
    if win is None:
        return
    h, w = win.getmaxyx()
    visible = h - 2
    # never scroll past the last full page
    offset = max(0, min(offset, len(records) - visible))
    for i, rec in enumerate(records[offset:offset + visible]):
        _addstr(win, i + 1, 1, rec.describe()[:w - 2], curses.color_pair(CP_TEXT))
    if offset > 0:
        _addstr(win, 0, w - 3, "▲", curses.color_pair(CP_ACCENT))
    if offset + visible < len(records):
        _addstr(win, h - 1, w - 3, "▼", curses.color_pair(CP_ACCENT))


def draw_settings(stdscr, rect, snap):
    win = _panel(stdscr, rect, "Settings")
    if win is None:
        return
    minutes = int(snap.lookback.total_seconds() // 60)
    lines = [(f"Current Time Interval = {minutes} minutes", curses.color_pair(CP_TEXT))]

    if snap.fetched_at:
        fetched = time.strftime('%H:%M:%S', time.localtime(snap.fetched_at))
        lines.append((f"Last fetch: {fetched}  ({len(snap.records)} attacks)", curses.color_pair(CP_TEXT)))
    if snap.refresh_interval:
        lines.append((f"Auto refresh every {int(snap.refresh_interval.total_seconds() // 60)} minutes",
                      curses.color_pair(CP_TEXT)))
    if snap.status:
        lines.append((f"⚠ {snap.status}", curses.color_pair(CP_WARN) | curses.A_BOLD))
    lines.append(("[←/h] prev region  [→/l] next region  [↑↓ PgUp PgDn] scroll log  [r] refresh  [q] quit",
                  curses.color_pair(CP_ACCENT) | curses.A_BOLD))

    h, _ = win.getmaxyx()
    for i, (text, attr) in enumerate(lines[:h - 2]):
        _addstr(win, i + 1, 2, text, attr)


def draw_map(stdscr, rect, snap, outline):
    region = REGIONS[snap.region_index]
    win = _panel(stdscr, rect, f"Map: {region.label}")
    if win is None:
        return
    h, w = win.getmaxyx()
    lon_min, lon_max, lat_min, lat_max = region.bounds
    canvas = BrailleCanvas(w - 2, h - 2, (lon_min, lon_max), (lat_min, lat_max))
    draw_world(canvas, outline)
    for seg in snap.segments:
        canvas.line(seg.x1, seg.y1, seg.x2, seg.y2, LAYER_ATTACK)

    colors = {
        LAYER_MAP: curses.color_pair(CP_MAP),
        LAYER_ATTACK: curses.color_pair(CP_ACCENT) | curses.A_BOLD,
    }
    for y, row in enumerate(canvas.rows()):
        for x, (ch, layer) in enumerate(row):
            if layer:
                _addstr(win, y + 1, x + 1, ch, colors[layer])


def render_frame(stdscr, snap, outline):
    """Draw one full frame. Reads the snapshot only."""
    stdscr.erase()
    h, w = stdscr.getmaxyx()
    panels = compute_layout(Rect(0, 0, w, h))

    draw_navbar(stdscr, panels["navbar"], snap.region_index)
    draw_requests(stdscr, panels["requests"], snap.records, snap.log_offset)
    draw_map(stdscr, panels["map"], snap, outline)
    draw_settings(stdscr, panels["settings"], snap)

    stdscr.noutrefresh()
    curses.doupdate()
