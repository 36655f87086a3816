import unittest

from seatmap.errors import GeometryError
from seatmap.geometry import (
    Bounds,
    Point,
    compute_bounds,
    point_in_polygon,
    polygon_area,
    polygon_color,
    segment_intersection,
    validate_polygon,
)

SQUARE = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]

# U shape: notch between x=10..20 open to the top (y grows downward)
U_SHAPE = [
    Point(0, 0),
    Point(30, 0),
    Point(30, 30),
    Point(20, 30),
    Point(20, 10),
    Point(10, 10),
    Point(10, 30),
    Point(0, 30),
]


class TestBounds(unittest.TestCase):
    def test_empty_points(self):
        self.assertEqual(compute_bounds([]), Bounds(0, 0, 0, 0))

    def test_min_max(self):
        b = compute_bounds([Point(3, -1), Point(-2, 4), Point(1, 1)])
        self.assertEqual(b, Bounds(-2, -1, 3, 4))
        self.assertEqual(b.width, 5)
        self.assertEqual(b.height, 5)
        self.assertEqual(b.center, Point(0.5, 1.5))

    def test_degenerate(self):
        self.assertTrue(compute_bounds([Point(0, 0), Point(10, 0)]).is_degenerate())
        self.assertFalse(compute_bounds(SQUARE).is_degenerate())


class TestPointInPolygon(unittest.TestCase):
    def test_square(self):
        self.assertTrue(point_in_polygon(Point(5, 5), SQUARE))
        self.assertFalse(point_in_polygon(Point(15, 5), SQUARE))
        self.assertFalse(point_in_polygon(Point(5, -1), SQUARE))

    def test_concave_notch(self):
        self.assertTrue(point_in_polygon(Point(5, 20), U_SHAPE))
        self.assertTrue(point_in_polygon(Point(25, 20), U_SHAPE))
        self.assertTrue(point_in_polygon(Point(15, 5), U_SHAPE))
        self.assertFalse(point_in_polygon(Point(15, 20), U_SHAPE))

    def test_empty_polygon(self):
        self.assertFalse(point_in_polygon(Point(0, 0), []))


class TestSegmentIntersection(unittest.TestCase):
    def test_crossing(self):
        hit = segment_intersection(Point(0, 0), Point(10, 0), Point(5, -5), Point(5, 5))
        self.assertIsNotNone(hit)
        self.assertAlmostEqual(hit.x, 5)
        self.assertAlmostEqual(hit.y, 0)

    def test_parallel(self):
        self.assertIsNone(segment_intersection(Point(0, 0), Point(10, 0), Point(0, 1), Point(10, 1)))

    def test_outside_second_segment(self):
        self.assertIsNone(segment_intersection(Point(0, 0), Point(10, 0), Point(5, 1), Point(5, 5)))

    def test_outside_first_segment(self):
        self.assertIsNone(segment_intersection(Point(0, 0), Point(2, 0), Point(5, -5), Point(5, 5)))


class TestPolygonValidation(unittest.TestCase):
    def test_valid(self):
        validate_polygon(SQUARE)
        validate_polygon(U_SHAPE)
        self.assertAlmostEqual(polygon_area(SQUARE), 100)

    def test_bow_tie_rejected(self):
        with self.assertRaises(GeometryError):
            validate_polygon([Point(0, 0), Point(2, 2), Point(0, 2), Point(2, 0)])

    def test_too_few_points(self):
        with self.assertRaises(GeometryError):
            validate_polygon([Point(0, 0), Point(1, 1)])

    def test_collinear_rejected(self):
        with self.assertRaises(GeometryError):
            validate_polygon([Point(0, 0), Point(5, 0), Point(10, 0)])

    def test_repeated_vertices(self):
        corner = Point(10, 0)
        self.assertEqual(polygon_area([corner, corner, corner]), 0.0)
        with self.assertRaises(GeometryError):
            validate_polygon([Point(0, 0), Point(1, 1), Point(0, 0)])

    def test_polygon_color(self):
        self.assertEqual(polygon_color(0, 4), "hsl(0, 70%, 60%)")
        self.assertEqual(polygon_color(1, 4), "hsl(90, 70%, 60%)")


if __name__ == "__main__":
    unittest.main()
