"""Country code → coordinates, and attack records → drawable map segments."""
import json
from collections import namedtuple

from .settings import debug_log, find_data_file

COUNTRIES_FILE = "countries.json"

# (lon, lat) order, i.e. canvas x/y
LineSegment = namedtuple("LineSegment", ["x1", "y1", "x2", "y2"])


class GeoResolutionError(LookupError):
    pass


class CountryCentroids:
    """GeoResolver over a table of ISO alpha-2 code → (lat, lon) centroids."""

    def __init__(self, table):
        self.table = {code.upper(): (float(lat), float(lon)) for code, (lat, lon) in table.items()}

    @classmethod
    def load(cls, path=None):
        path = path or find_data_file(COUNTRIES_FILE)
        if path is None:
            raise FileNotFoundError(COUNTRIES_FILE)
        with open(path, "r", encoding="utf-8") as f:
            table = json.load(f)
        debug_log(f"GEO: {len(table)} country centroids loaded from {path}")
        return cls(table)

    def resolve(self, code):
        try:
            return self.table[code.upper()]
        except (KeyError, AttributeError):
            raise GeoResolutionError(f"unknown country code: {code!r}") from None

    def __contains__(self, code):
        return isinstance(code, str) and code.upper() in self.table


def project_lines(records, resolver):
    """One segment per record whose two endpoints resolve; the rest are skipped."""
    segments = []
    for rec in records:
        try:
            o_lat, o_lon = resolver.resolve(rec.origin_code)
            t_lat, t_lon = resolver.resolve(rec.target_code)
        except GeoResolutionError as e:
            debug_log(f"GEO: skipping {rec.origin_code}->{rec.target_code}: {e}")
            continue
        segments.append(LineSegment(o_lon, o_lat, t_lon, t_lat))
    return segments
