"""Braille dot canvas in world coordinates (lon on x, lat on y)."""
import json

from .settings import debug_log, find_data_file

WORLD_FILE = "world.json"

LAYER_MAP = 1
LAYER_ATTACK = 2

# dot bit for (dx, dy) inside a 2x4 braille cell
_LEFT_BITS = (0, 1, 2, 6)
_RIGHT_BITS = (3, 4, 5, 7)


class BrailleCanvas:
    """
    A width x height cell grid with 2x4 dots per cell.

    Points are given in canvas coordinates and mapped linearly onto the
    bounds; anything outside the bounds is dropped, never rescaled.
    """

    def __init__(self, width, height, x_bounds, y_bounds):
        self.width = max(0, width)
        self.height = max(0, height)
        self.x_bounds = x_bounds
        self.y_bounds = y_bounds
        self.dots_w = self.width * 2
        self.dots_h = self.height * 4
        self._bits = [[0] * self.width for _ in range(self.height)]
        self._layer = [[0] * self.width for _ in range(self.height)]

    def _to_dot(self, x, y):
        x0, x1 = self.x_bounds
        y0, y1 = self.y_bounds
        if x1 <= x0 or y1 <= y0 or not self.dots_w or not self.dots_h:
            return None
        dx = (x - x0) / (x1 - x0) * (self.dots_w - 1)
        dy = (y1 - y) / (y1 - y0) * (self.dots_h - 1)
        return int(round(dx)), int(round(dy))

    def _set_dot(self, dx, dy, layer):
        if not (0 <= dx < self.dots_w and 0 <= dy < self.dots_h):
            return
        cx, cy = dx // 2, dy // 4
        bits = _LEFT_BITS if dx % 2 == 0 else _RIGHT_BITS
        self._bits[cy][cx] |= 1 << bits[dy % 4]
        if layer > self._layer[cy][cx]:
            self._layer[cy][cx] = layer

    def point(self, x, y, layer=LAYER_MAP):
        d = self._to_dot(x, y)
        if d:
            self._set_dot(d[0], d[1], layer)

    def line(self, x1, y1, x2, y2, layer=LAYER_MAP):
        a = self._to_dot(x1, y1)
        b = self._to_dot(x2, y2)
        if a is None or b is None:
            return
        (ax, ay), (bx, by) = a, b
        # Bresenham over dot space, clipped dot by dot
        dx, dy = abs(bx - ax), -abs(by - ay)
        sx = 1 if ax < bx else -1
        sy = 1 if ay < by else -1
        err = dx + dy
        while True:
            self._set_dot(ax, ay, layer)
            if ax == bx and ay == by:
                break
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                ax += sx
            if e2 <= dx:
                err += dx
                ay += sy

    def rows(self):
        """Yield one list of (char, layer) per cell row; layer 0 means blank."""
        for bits_row, layer_row in zip(self._bits, self._layer):
            yield [(chr(0x2800 + b) if b else " ", layer) for b, layer in zip(bits_row, layer_row)]


def load_world_outline(path=None):
    """Coastline polylines as lists of [lon, lat] pairs."""
    path = path or find_data_file(WORLD_FILE)
    if path is None:
        debug_log(f"MAP: {WORLD_FILE} not found, drawing without outline")
        return []
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return data.get("outlines", [])


def draw_world(canvas, outline):
    for poly in outline:
        for (lon1, lat1), (lon2, lat2) in zip(poly, poly[1:]):
            canvas.line(lon1, lat1, lon2, lat2, LAYER_MAP)
