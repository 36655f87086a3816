import contextlib
import io
import json
import os
import tempfile
import unittest

from seatmap.__main__ import main
from seatmap.storage import load_layout


def run(*argv):
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        code = main(list(argv))
    return code, out.getvalue()


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.file = os.path.join(self._tmpdir.name, "layout.json")
        run("init", "--file", self.file)

    def tearDown(self):
        self._tmpdir.cleanup()

    def test_add_toggle_price(self):
        code, out = run("add", "--file", self.file, "--points", "0,0 100,0 100,100 0,100", "--name", "Floor")
        self.assertEqual(code, 0)
        doc, _ = load_layout(self.file)
        section = doc.sections[0]
        seat = section.seats[0].id

        self.assertEqual(run("toggle", "--file", self.file, "--seat", seat)[0], 0)
        code, out = run("price", "--file", self.file, "--json")
        self.assertEqual(code, 0)
        summary = json.loads(out)
        self.assertEqual(summary["seats_occupied"], 1)

        self.assertEqual(run("lock", "--file", self.file, "--seat", seat)[0], 0)
        code, out = run("toggle", "--file", self.file, "--seat", seat)
        self.assertEqual(code, 1)
        self.assertIn("locked", out)

    def test_split_rejected(self):
        run("shape", "--file", self.file, "--shape", "polygon", "--center", "0,0")
        doc, _ = load_layout(self.file)
        code, out = run("split", "--file", self.file, "--section", doc.sections[0].id, "--start", "500,500", "--end", "600,600")
        self.assertEqual(code, 1)
        self.assertIn("found 0", out)

    def test_split(self):
        run("shape", "--file", self.file, "--shape", "polygon", "--center", "0,0")
        doc, _ = load_layout(self.file)
        code, _ = run("split", "--file", self.file, "--section", doc.sections[0].id, "--start", "0,-100", "--end", "0,100")
        self.assertEqual(code, 0)
        self.assertEqual(len(load_layout(self.file)[0].sections), 2)

    def test_import_polygons(self):
        src = os.path.join(self._tmpdir.name, "polygons.json")
        with open(src, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "polygons": [[[0, 0], [100, 0], [100, 100], [0, 100]]],
                    "detected_text": [{"text": "B", "bbox": [10, 10, 20, 20]}],
                },
                f,
            )
        code, _ = run("import-polygons", "--file", self.file, "--input", src)
        self.assertEqual(code, 0)
        self.assertEqual(load_layout(self.file)[0].sections[0].id, "B-1")

    def test_lock_email_persists(self):
        run("add", "--file", self.file, "--points", "0,0 100,0 100,100 0,100")
        seat = load_layout(self.file)[0].sections[0].seats[0].id
        self.assertEqual(run("lock", "--file", self.file, "--seat", seat, "--email", "a@b.c")[0], 0)
        _, engine = load_layout(self.file)
        self.assertEqual(engine.holder(seat), "a@b.c")

    def test_import_polygons_twice(self):
        src = os.path.join(self._tmpdir.name, "polygons.json")
        with open(src, "w", encoding="utf-8") as f:
            json.dump({"polygons": [[[0, 0], [100, 0], [100, 100], [0, 100]]]}, f)
        self.assertEqual(run("import-polygons", "--file", self.file, "--input", src)[0], 0)
        self.assertEqual(run("import-polygons", "--file", self.file, "--input", src)[0], 0)
        code, out = run("show", "--file", self.file)
        self.assertEqual(code, 0)
        self.assertEqual([s.id for s in load_layout(self.file)[0].sections], ["Section 1-1", "Section 1-1-2"])

    def test_errors_exit_2(self):
        code, out = run("move", "--file", self.file, "--section", "missing", "--dx", "1", "--dy", "1")
        self.assertEqual(code, 2)
        self.assertIn("Error:", out)


if __name__ == "__main__":
    unittest.main()
