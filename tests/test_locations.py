import unittest

from lsifgraph.errors import ParseError
from lsifgraph.graph.locations import (
    Location,
    Position,
    make_location,
    parse_file_position,
    parse_location,
    parse_span,
)


class TestLocations(unittest.TestCase):
    def test_key_omits_end(self):
        a = make_location("src/a.cpp", 3, 4, 5)
        b = make_location("src/a.cpp", 3, 4, 9)
        self.assertEqual(a.key, "src/a.cpp:3:4")
        self.assertEqual(a.key, b.key)

    def test_multi_line_range_is_rejected(self):
        with self.assertRaises(ParseError):
            Location(uri="a", start=Position(1, 0), end=Position(2, 0))

    def test_parse_file_position(self):
        fp = parse_file_position("src/a.cpp:12:7")
        self.assertEqual(fp.uri, "src/a.cpp")
        self.assertEqual(fp.position, Position(12, 7))

    def test_parse_file_position_keeps_colons_in_path(self):
        fp = parse_file_position("c:/src/a.cpp:1:2")
        self.assertEqual(fp.uri, "c:/src/a.cpp")

    def test_parse_file_position_errors(self):
        for bad in ["a.cpp:1", "a.cpp:x:1", "a.cpp:1:y", ":1:2", ""]:
            with self.subTest(bad=bad):
                with self.assertRaises(ParseError):
                    parse_file_position(bad)

    def test_parse_location_requires_same_file(self):
        self.assertEqual(parse_location("a:1:2", "a:1:5"), make_location("a", 1, 2, 5))
        with self.assertRaises(ParseError):
            parse_location("a:1:2", "b:1:5")
        with self.assertRaises(ParseError):
            parse_location("a:1:2", "a:2:0")

    def test_parse_span_converts_to_zero_based(self):
        self.assertEqual(parse_span("1:0-11"), (0, 0, 11))
        self.assertEqual(parse_span("5:3-4", one_based=False), (5, 3, 4))

    def test_parse_span_errors(self):
        for bad in ["1:0", "x:0-1", "0:0-1", "2:5-3", "2-3"]:
            with self.subTest(bad=bad):
                with self.assertRaises(ParseError):
                    parse_span(bad)


if __name__ == "__main__":
    unittest.main()
