import unittest

from seatmap.config import EditorDefaults, load_defaults
from seatmap.errors import ConfigError


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        d = load_defaults({})
        self.assertEqual(d, EditorDefaults())
        self.assertEqual((d.rows, d.seats_per_row), (10, 15))
        self.assertEqual((d.viewport_width, d.viewport_height), (1000, 600))

    def test_environment_overrides(self):
        d = load_defaults({"SEATMAP_DEFAULT_ROWS": "4", "SEATMAP_DEFAULT_PRICE": "12.5", "SEATMAP_LOG_LEVEL": "debug"})
        self.assertEqual(d.rows, 4)
        self.assertEqual(d.price, 12.5)
        self.assertEqual(d.log_level, "DEBUG")

    def test_invalid_values(self):
        with self.assertRaises(ConfigError):
            load_defaults({"SEATMAP_DEFAULT_ROWS": "many"})
        with self.assertRaises(ConfigError):
            load_defaults({"SEATMAP_DEFAULT_SEATS_PER_ROW": "0"})


if __name__ == "__main__":
    unittest.main()
