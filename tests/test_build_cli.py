import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from typer.testing import CliRunner

from lsifgraph.cli import app
from lsifgraph.config import Settings
from lsifgraph.errors import EmptyInputError, UnknownRangeError
from lsifgraph.graph.build import write_lsif
from lsifgraph.graph.check import check_items
from lsifgraph.graph.emit import GraphEmitter
from lsifgraph.graph.sinks import ListSink, load_items


def write_symbols(root: Path) -> None:
    lines = [
        {"symbol": {"file": "A", "range": "1:0-1", "hover": "int"}},
        {"references": {"file": "B", "ranges": ["2:0-11"]}},
    ]
    (root / "one.lsif.in").write_text("\n".join(json.dumps(x) for x in lines) + "\n", encoding="utf-8")


class TestWriteLsif(unittest.TestCase):
    def test_symbols_dialect_end_to_end(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            write_symbols(root)
            sink = ListSink()
            res = write_lsif(in_file_glob=str(root / "*.lsif.in"), root=root, emit=sink, dialect="symbols")

        self.assertEqual(res["files"], 1)
        self.assertEqual(res["facts"], 2)
        self.assertEqual(res["documents"], 2)
        self.assertEqual(res["ranges"], 2)
        self.assertEqual(res["definitions"], 1)
        self.assertEqual(res["items"], len(sink.items))
        self.assertTrue(check_items(sink.items).ok)

        ids = [item["id"] for item in sink.items]
        self.assertIn("item:textDocument/references:references:A:0:0:B", ids)
        self.assertIn("hover:A:0:0", ids)

    def test_settings_are_applied(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            write_symbols(root)
            sink = ListSink()
            write_lsif(
                in_file_glob=str(root / "*.lsif.in"),
                root=root,
                emit=sink,
                dialect="symbols",
                settings=Settings(language_id="ocaml", tool_name="lsif-ocaml", store_path=str(root / "facts.db")),
            )
            self.assertTrue((root / "facts.db").exists())
        meta = sink.items[0]
        self.assertEqual(meta["toolInfo"]["name"], "lsif-ocaml")
        self.assertEqual(sink.items[1]["kind"], "ocaml")

    def test_no_inputs(self):
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(EmptyInputError):
                write_lsif(in_file_glob=str(Path(d) / "*.lsif.in"), root=d, emit=ListSink())


class TestCli(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()

    def test_convert_check_stats(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            write_symbols(root)
            out = root / "out" / "dump.lsif"
            out.parent.mkdir()
            out.write_text("stale\n", encoding="utf-8")

            res = self.runner.invoke(
                app,
                ["convert", "--in-file-glob", str(root / "*.lsif.in"), "--root", str(root), "--out", str(out), "--dialect", "symbols"],
            )
            self.assertEqual(res.exit_code, 0, res.output)
            items = load_items(out)
            self.assertEqual(items[0]["id"], "meta")
            self.assertEqual(len(items), 27)

            res = self.runner.invoke(app, ["check", "--input", str(out)])
            self.assertEqual(res.exit_code, 0, res.output)
            self.assertIn("OK: 27 items", res.output)

            res = self.runner.invoke(app, ["stats", "--input", str(out)])
            self.assertEqual(res.exit_code, 0, res.output)
            self.assertIn("Total: 27", res.output)

    def test_convert_with_monikers(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            write_symbols(root)
            monikers = root / "monikers.jsonl"
            monikers.write_text(
                json.dumps({"range": "A:0:0", "kind": "import", "identifier": "x", "package": "dep"}) + "\n",
                encoding="utf-8",
            )
            out = root / "dump.lsif"
            res = self.runner.invoke(
                app,
                [
                    "convert",
                    "--in-file-glob",
                    str(root / "*.lsif.in"),
                    "--root",
                    str(root),
                    "--out",
                    str(out),
                    "--dialect",
                    "symbols",
                    "--monikers",
                    str(monikers),
                ],
            )
            self.assertEqual(res.exit_code, 0, res.output)
            ids = [item["id"] for item in load_items(out)]
        self.assertIn("package:dep", ids)
        self.assertNotIn("definition:A:0:0", ids)

    def test_convert_fails_without_inputs(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            out = root / "dump.lsif"
            res = self.runner.invoke(
                app, ["convert", "--in-file-glob", str(root / "*.lsif.in"), "--root", str(root), "--out", str(out)]
            )
        self.assertEqual(res.exit_code, 1)
        self.assertIn("EmptyInputError", res.output)

    def test_failed_emission_leaves_partial_output(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            write_symbols(root)
            out = root / "dump.lsif"
            with mock.patch.object(GraphEmitter, "_definition_group", side_effect=UnknownRangeError("#9")):
                res = self.runner.invoke(
                    app,
                    ["convert", "--in-file-glob", str(root / "*.lsif.in"), "--root", str(root), "--out", str(out), "--dialect", "symbols"],
                )
            self.assertEqual(res.exit_code, 1)
            self.assertIn("UnknownRangeError", res.output)
            items = load_items(out)
        # Everything up to the first definition group was written and kept.
        self.assertEqual([i["id"] for i in items][:3], ["meta", "project", "projectBegin"])
        self.assertEqual(items[-1]["id"], "B:1:0")

    def test_convert_reports_invalid_utf8(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            (root / "x.ml.lsif.in").write_bytes(b"\xff\n")
            res = self.runner.invoke(
                app, ["convert", "--in-file-glob", str(root / "*.lsif.in"), "--root", str(root), "--out", str(root / "o.lsif")]
            )
        self.assertEqual(res.exit_code, 1)
        self.assertIn("ParseError", res.output)
        self.assertNotIsInstance(res.exception, UnicodeDecodeError)

    def test_check_fails_on_duplicates(self):
        with tempfile.TemporaryDirectory() as d:
            dump = Path(d) / "dump.lsif"
            item = {"id": "package:p", "type": "vertex", "label": "packageInformation"}
            dump.write_text(json.dumps(item) + "\n" + json.dumps(item) + "\n", encoding="utf-8")
            res = self.runner.invoke(app, ["check", "--input", str(dump)])
        self.assertEqual(res.exit_code, 1)
        self.assertIn("duplicate id package:p", res.output)

    def test_bad_dialect(self):
        with tempfile.TemporaryDirectory() as d:
            res = self.runner.invoke(
                app,
                ["convert", "--in-file-glob", "*.x", "--root", d, "--out", str(Path(d) / "o"), "--dialect", "dxr"],
            )
        self.assertNotEqual(res.exit_code, 0)


class TestMonikerTable(unittest.TestCase):
    def test_malformed_moniker_table(self):
        from lsifgraph.errors import ParseError
        from lsifgraph.graph.monikers import StaticMonikerResolver

        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "m.jsonl"
            p.write_text(json.dumps({"range": "A:0", "kind": "import", "identifier": "x", "package": "p"}) + "\n")
            with self.assertRaises(ParseError):
                StaticMonikerResolver.load(p)
            p.write_text(json.dumps({"range": "A:0:0", "kind": "local", "identifier": "x", "package": "p"}) + "\n")
            with self.assertRaises(ParseError):
                StaticMonikerResolver.load(p)
            p.write_bytes(b"\xff\n")
            with self.assertRaises(ParseError):
                StaticMonikerResolver.load(p)


if __name__ == "__main__":
    unittest.main()
