import json
import os
import tempfile
import unittest

from ddosradar.canvas import LAYER_ATTACK, LAYER_MAP, BrailleCanvas, draw_world, load_world_outline
from ddosradar.geo import CountryCentroids, GeoResolutionError, LineSegment, project_lines
from ddosradar.model import AttackRecord

TABLE = {
    "US": [37.09, -95.71],
    "CN": [35.86, 104.19],
    "DE": [51.17, 10.45],
    "FR": [46.23, 2.21],
}


class TestCountryCentroids(unittest.TestCase):
    def test_packaged_table(self):
        geo = CountryCentroids.load()
        lat, lon = geo.resolve("US")
        self.assertAlmostEqual(lat, 37.09, places=1)
        self.assertAlmostEqual(lon, -95.71, places=1)
        self.assertEqual(geo.resolve("de"), geo.resolve("DE"))
        for code in ("CN", "RU", "BR", "AU", "ZA", "IN", "JP", "GB"):
            self.assertIn(code, geo)

    def test_membership(self):
        geo = CountryCentroids(TABLE)
        self.assertIn("US", geo)
        self.assertIn("us", geo)
        self.assertNotIn("XX", geo)
        self.assertNotIn(None, geo)

    def test_unknown_code(self):
        geo = CountryCentroids(TABLE)
        with self.assertRaises(GeoResolutionError):
            geo.resolve("XX")
        with self.assertRaises(LookupError):
            geo.resolve("")
        with self.assertRaises(GeoResolutionError):
            geo.resolve(None)

    def test_load_from_path(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "countries.json")
            with open(path, "w") as f:
                json.dump({"zz": [1, 2]}, f)
            geo = CountryCentroids.load(path)
        self.assertEqual(geo.resolve("ZZ"), (1.0, 2.0))


class TestProjectLines(unittest.TestCase):
    def setUp(self):
        self.geo = CountryCentroids(TABLE)

    def test_segment_is_lon_lat(self):
        segs = project_lines([AttackRecord("United States", "US", "China", "CN")], self.geo)
        self.assertEqual(segs, [LineSegment(-95.71, 37.09, 104.19, 35.86)])

    def test_unresolvable_records_are_skipped(self):
        records = [
            AttackRecord("United States", "US", "China", "CN"),
            AttackRecord("Nowhere", "XX", "Germany", "DE"),
            AttackRecord("Germany", "DE", "France", "FR"),
            AttackRecord("France", "FR", "Nowhere", "QQ"),
            AttackRecord("China", "CN", "United States", "US"),
        ]
        segs = project_lines(records, self.geo)
        self.assertEqual(len(segs), 3)
        self.assertEqual(segs[1], LineSegment(10.45, 51.17, 2.21, 46.23))

    def test_empty(self):
        self.assertEqual(project_lines([], self.geo), [])


class TestBrailleCanvas(unittest.TestCase):
    def _drawn(self, canvas):
        return [(x, y, layer) for y, row in enumerate(canvas.rows())
                for x, (ch, layer) in enumerate(row) if layer]

    def test_point_corners(self):
        c = BrailleCanvas(10, 5, (-180, 180), (-90, 90))
        c.point(-180, 90)
        c.point(180, -90)
        rows = list(c.rows())
        self.assertEqual(rows[0][0][0], chr(0x2801))
        self.assertEqual(rows[4][9][0], chr(0x2880))

    def test_out_of_bounds_dropped(self):
        c = BrailleCanvas(10, 5, (-25, 45), (34, 72))
        c.point(-95.7, 37.1)
        c.line(-95.7, 37.1, -120, 30)
        self.assertEqual(self._drawn(c), [])

    def test_line_truncated_not_rescaled(self):
        # US -> DE seen through the Europe box: only the European end shows
        c = BrailleCanvas(20, 10, (-25, 45), (34, 72))
        c.line(-95.7, 37.1, 10.45, 51.17, LAYER_ATTACK)
        drawn = self._drawn(c)
        self.assertTrue(drawn)
        self.assertTrue(all(x >= 0 for x, _, _ in drawn))
        # the left edge is reached because the line enters from outside
        self.assertEqual(min(x for x, _, _ in drawn), 0)

    def test_attack_layer_wins_cell(self):
        c = BrailleCanvas(4, 2, (0, 4), (0, 2))
        c.line(0, 1, 4, 1, LAYER_MAP)
        c.line(0, 1, 4, 1, LAYER_ATTACK)
        self.assertTrue(all(layer == LAYER_ATTACK for _, _, layer in self._drawn(c)))

    def test_zero_size(self):
        c = BrailleCanvas(0, 0, (-180, 180), (-90, 90))
        c.line(-10, -10, 10, 10)
        self.assertEqual(list(c.rows()), [])

    def test_world_outline(self):
        outline = load_world_outline()
        self.assertGreater(len(outline), 10)
        c = BrailleCanvas(60, 20, (-180, 180), (-90, 90))
        draw_world(c, outline)
        self.assertGreater(len(self._drawn(c)), 100)


if __name__ == "__main__":
    unittest.main()
