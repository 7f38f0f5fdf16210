"""
Operator CLI for asrun-ingest using Typer.

Decodes local AS-RUN logs, lists billboards for a program, and runs the
ingestion flow over local files against the configured database.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from ..asrun.billboards import BillboardAssociator
from ..asrun.decoder import FixedWidthLogDecoder
from ..asrun.log_types import ParsedLogData
from ..asrun.timezones import TimeZoneResolver
from ..infra.db import get_sessionmaker
from ..infra.logging import configure_logging
from ..infra.object_store import LocalObjectStore
from ..infra.settings import settings
from ..usecases.ingest_orchestrator import IngestionOrchestrator, LogFileRef

app = typer.Typer(help="AS-RUN log ingestion operator CLI")


def _decode_file(path: Path, region: str) -> ParsedLogData:
    try:
        content = path.read_bytes()
    except OSError as e:
        typer.echo(f"Error reading {path}: {e}", err=True)
        raise typer.Exit(1)
    resolver = TimeZoneResolver(default_region=settings.default_region)
    return FixedWidthLogDecoder(resolver).decode(content, region)


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    configure_logging(log_level)


@app.command("decode")
def decode(
    path: Path = typer.Argument(..., help="Path to a .LOG file"),
    region: str = typer.Option(..., "--region", "-r", help="Region code (SYD, MEL, BNE/BRI, PER, ADL/ADE)"),
    json_output: bool = typer.Option(False, "--json", help="Output entries in JSON format"),
):
    """Decode a local AS-RUN log and report what it contains."""
    parsed = _decode_file(path, region)

    if json_output:
        payload = {
            "total_entries": len(parsed.all_entries),
            "billboards": [e.to_dict() for e in parsed.billboards],
            "programs": [e.to_dict() for e in parsed.programs],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    stats = parsed.stats
    typer.echo(f"Parsed {path.name}:")
    typer.echo(f"  Lines scanned: {stats.lines_scanned}")
    typer.echo(f"  Total entries: {len(parsed.all_entries)}")
    typer.echo(f"  Billboards: {len(parsed.billboards)}")
    typer.echo(f"  Programs: {len(parsed.programs)}")
    if stats.degraded_timestamps:
        typer.echo(f"  Entries without timestamp: {stats.degraded_timestamps}")


@app.command("billboards")
def billboards(
    path: Path = typer.Argument(..., help="Path to a .LOG file"),
    region: str = typer.Option(..., "--region", "-r", help="Region code"),
    keyword: str = typer.Option(..., "--keyword", "-k", help="Program keyword, e.g. 'UNITED CUP'"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List the billboards that aired during a program."""
    parsed = _decode_file(path, region)
    found = BillboardAssociator(parsed).associate(keyword)

    if json_output:
        typer.echo(json.dumps({"keyword": keyword, "billboards": [e.to_dict() for e in found]}, indent=2))
        return

    typer.echo(f"Billboards for {keyword!r}: {len(found)}")
    for entry in found:
        when = entry.time.isoformat() if entry.time else "--:--:--"
        typer.echo(f"  {when}  {entry.billboard_kind.value:<16}  {entry.database_title}")


@app.command("ingest")
def ingest(
    paths: list[Path] = typer.Argument(..., help="Local .LOG files named YYYYMMDD_REGION-CHANNEL.LOG"),
    test_db: bool = typer.Option(False, "--test-db", help="Use test database context"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Run the ingestion flow over local files."""
    orchestrator = IngestionOrchestrator(
        LocalObjectStore(),
        get_sessionmaker(for_test=test_db),
    )
    refs = [LogFileRef(bucket="", key=str(p.resolve())) for p in paths]
    try:
        summary = orchestrator.ingest_batch(refs)
    except Exception as e:
        if json_output:
            typer.echo(json.dumps({"success": False, "error": str(e)}, indent=2))
        else:
            typer.echo(f"Error running ingestion: {e}", err=True)
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return

    typer.echo(f"Broadcasts created: {summary.broadcasts_created}")
    typer.echo(f"Programs matched: {summary.programs_matched}")
    for f in summary.skipped:
        typer.echo(f"  Skipped {f.key}: {f.skipped_reason}")
    for f in summary.failed:
        typer.echo(f"  Failed {f.key}: {f.error}")
    if summary.failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
