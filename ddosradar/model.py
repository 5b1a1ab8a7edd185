"""Attack records, the region catalog and the small pieces of state the dashboard owns."""
import time
from collections import namedtuple
from dataclasses import dataclass


@dataclass(frozen=True)
class AttackRecord:
    origin_name: str
    origin_code: str
    target_name: str
    target_code: str

    @classmethod
    def from_feed(cls, row):
        """Build a record from one entry of the feed's ``top_0`` list (camelCase keys)."""
        fields = (
            row["originCountryName"],
            row["originCountryAlpha2"],
            row["targetCountryName"],
            row["targetCountryAlpha2"],
        )
        if not all(isinstance(v, str) for v in fields):
            raise TypeError(f"non-string field in attack row: {row!r}")
        return cls(*fields)

    def describe(self):
        return f"{self.origin_name} → {self.target_name}"


# bounds are (lon_min, lon_max, lat_min, lat_max)
Region = namedtuple("Region", ["label", "bounds"])

REGIONS = (
    Region("World", (-180.0, 180.0, -90.0, 90.0)),
    Region("Europe", (-25.0, 45.0, 34.0, 72.0)),
    Region("Asia", (25.0, 150.0, -12.0, 80.0)),
    Region("Oceania", (110.0, 180.0, -50.0, 0.0)),
    Region("N. America", (-170.0, -50.0, 5.0, 84.0)),
    Region("S. America", (-92.0, -30.0, -56.0, 14.0)),
    Region("Africa", (-20.0, 55.0, -36.0, 38.0)),
)


class RegionSelector:
    """Index into REGIONS, moved one step at a time and saturating at both ends."""

    def __init__(self, index=0, catalog=REGIONS):
        if not 0 <= index < len(catalog):
            raise ValueError(f"region index {index} out of range")
        self.catalog = catalog
        self.index = index

    @property
    def region(self):
        return self.catalog[self.index]

    def previous(self):
        if self.index > 0:
            self.index -= 1

    def next(self):
        if self.index < len(self.catalog) - 1:
            self.index += 1

    def select(self, label):
        """Jump to a region by label (case-insensitive, spaces and dots ignored)."""
        wanted = _norm_label(label)
        for i, region in enumerate(self.catalog):
            if _norm_label(region.label) == wanted:
                self.index = i
                return
        raise ValueError(f"unknown region: {label}")


def _norm_label(label):
    return label.lower().replace(".", "").replace(" ", "")


class AttackCache:
    """Last fetched batch of attacks. Only ever replaced wholesale or drained."""

    def __init__(self):
        self._records = ()
        self.fetched_at = None

    @property
    def records(self):
        return self._records

    def is_empty(self):
        return not self._records

    def replace(self, records):
        self._records = tuple(records)
        self.fetched_at = time.time()

    def drain(self):
        self._records = ()

    def age(self, now=None):
        if self.fetched_at is None:
            return None
        return (now if now is not None else time.time()) - self.fetched_at

    def __len__(self):
        return len(self._records)
