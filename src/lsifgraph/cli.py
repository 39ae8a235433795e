from __future__ import annotations

import dataclasses
from collections import Counter
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import Settings
from .errors import LsifError
from .graph.build import write_lsif
from .graph.check import check_items
from .graph.monikers import StaticMonikerResolver
from .graph.sinks import JsonlSink, load_items, remove_stale
from .ingest.runner import DIALECTS


app = typer.Typer(add_completion=False, help="Convert symbol definition/reference dumps into LSIF.")
console = Console()


@app.command()
def convert(
    in_file_glob: str = typer.Option(..., "--in-file-glob", help="Input files, e.g. 'src/**/*.lsif.in'"),
    root: Path = typer.Option(..., "--root", exists=True, file_okay=False, dir_okay=True, help="Project root"),
    out: Path = typer.Option(..., "--out", help="Output JSONL path (replaced if it exists)"),
    dialect: str = typer.Option("merlin", "--dialect", help=f"Input dialect: {', '.join(DIALECTS)}"),
    monikers: Path | None = typer.Option(None, "--monikers", exists=True, file_okay=True, dir_okay=False, help="JSONL moniker table"),
    include_contents: bool = typer.Option(False, "--include-contents", help="Embed base64 file contents in documents"),
    language_id: str | None = typer.Option(None, "--language-id", help="Document languageId / moniker scheme"),
):
    """Convert input dumps into an LSIF graph."""
    if dialect not in DIALECTS:
        raise typer.BadParameter(f"--dialect must be one of: {', '.join(DIALECTS)}")

    settings = Settings()
    if language_id:
        settings = dataclasses.replace(settings, language_id=language_id)

    if remove_stale(out):
        console.print(f"Removed stale {out}", style="dim")

    try:
        resolver = StaticMonikerResolver.load(monikers) if monikers is not None else None
        with JsonlSink(out) as sink:
            res = write_lsif(
                in_file_glob=in_file_glob,
                root=root,
                emit=sink,
                dialect=dialect,
                settings=settings,
                monikers=resolver,
                include_contents=include_contents,
                console=console,
            )
    except LsifError as e:
        console.print(f"{type(e).__name__}: {e}", style="red", markup=False)
        raise typer.Exit(code=1)

    table = Table(title="LSIF Conversion")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for k, v in res.items():
        table.add_row(k, str(v))
    console.print(table)
    console.print(f"Wrote {out}")


@app.command()
def check(
    input: Path = typer.Option(..., "--input", exists=True, file_okay=True, dir_okay=False),
    show: int = typer.Option(20, help="Max problems to print per category"),
):
    """Check an LSIF dump for duplicate ids, dangling edges and bad reference partitions."""
    report = check_items(load_items(input))

    table = Table(title=f"Check {input.name}")
    table.add_column("Check")
    table.add_column("Problems", justify="right")
    table.add_row("duplicate ids", str(len(report.duplicate_ids)))
    table.add_row("dangling endpoints", str(len(report.dangling)))
    table.add_row("reference partitions", str(len(report.partition_errors)))
    table.add_row("multi-line ranges", str(len(report.multi_line_ranges)))
    console.print(table)

    for id_, n in list(report.duplicate_ids.items())[:show]:
        console.print(f"- duplicate id {id_} (x{n})", markup=False)
    for edge_id, v in report.dangling[:show]:
        console.print(f"- {edge_id} -> {v} was not emitted before use", markup=False)
    for msg in report.partition_errors[:show]:
        console.print(f"- {msg}", markup=False)
    for id_ in report.multi_line_ranges[:show]:
        console.print(f"- range {id_} spans multiple lines", markup=False)

    if not report.ok:
        raise typer.Exit(code=1)
    console.print(f"OK: {report.items} items", style="green")


@app.command()
def stats(
    input: Path = typer.Option(..., "--input", exists=True, file_okay=True, dir_okay=False),
):
    """Count items per label in an LSIF dump."""
    items = load_items(input)
    by_label = Counter((str(i["type"]), str(i["label"])) for i in items)

    table = Table(title="LSIF Stats")
    table.add_column("type")
    table.add_column("label")
    table.add_column("count", justify="right")
    for (type_, label), n in sorted(by_label.items()):
        table.add_row(type_, label, str(n))
    console.print(table)
    console.print(f"Total: {len(items)}")


if __name__ == "__main__":
    app()
