"""Split the terminal into the four dashboard panels. Pure, recomputed every frame."""
from collections import namedtuple


class Rect(namedtuple("Rect", ["x", "y", "width", "height"])):
    __slots__ = ()

    @property
    def area(self):
        return self.width * self.height


def split(length, percentages):
    """Cut ``length`` cells into parts proportional to ``percentages``.

    Rounding leftovers go to the last part so the parts always add up to ``length``.
    """
    total = sum(percentages)
    sizes = [length * p // total for p in percentages[:-1]]
    sizes.append(length - sum(sizes))
    return sizes


def _vsplit(rect, percentages):
    parts, y = [], rect.y
    for h in split(rect.height, percentages):
        parts.append(Rect(rect.x, y, rect.width, h))
        y += h
    return parts


def _hsplit(rect, percentages):
    parts, x = [], rect.x
    for w in split(rect.width, percentages):
        parts.append(Rect(x, rect.y, w, rect.height))
        x += w
    return parts


def compute_layout(area):
    """
    ┌ navbar ┬──────────────┐
    ├────────┤              │  80%
    │requests│     map      │
    ├────────┴──────────────┤
    │       settings        │  20%
    └───────────────────────┘
       32%         68%
    """
    dashboard, settings = _vsplit(area, (80, 20))
    side, map_rect = _hsplit(dashboard, (32, 68))
    navbar, requests = _vsplit(side, (20, 80))
    return {
        "navbar": navbar,
        "settings": settings,
        "map": map_rect,
        "requests": requests,
    }
