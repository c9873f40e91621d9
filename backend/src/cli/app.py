"""Typer application entrypoint."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.table import Table

from analytics.aggregator import DEFAULT_TOP_N, RankedEntry, aggregate
from analytics.export import build_dataframe, export_csv, export_excel, export_filename
from app_settings.models import UpdateSettingsPayload
from app_settings.service import settings_service
from db.schema import ensure_application_schema
from inspections.service import inspection_service
from logging_config import configure_logging
from review.models import Actor, ReviewStatus, Role


configure_logging()


app = typer.Typer(help="PackScan backend CLI")
db_app = typer.Typer(help="Manage the application database")
reference_app = typer.Typer(help="Inspect or replace the reference identifier base")

app.add_typer(db_app, name="db")
app.add_typer(reference_app, name="reference")


def _operator(actor_id: str) -> Actor:
    return Actor(id=actor_id, name=actor_id.upper(), role=Role.ADMIN)


def _ranking_table(title: str, entries: list[RankedEntry]) -> Table:
    table = Table(title=title)
    table.add_column("Name")
    table.add_column("Records", justify="right")
    table.add_column("Share", justify="right")
    for entry in entries:
        table.add_row(entry.key, str(entry.count), f"{entry.share:.0%}")
    return table


@db_app.command("init")
def db_init() -> None:
    ensure_application_schema()
    typer.echo("Application schema ready.")


@app.command("report")
def report(
    top: int = typer.Option(DEFAULT_TOP_N, help="Entries per ranking"),
    status: Optional[ReviewStatus] = typer.Option(None, help="Also list records in this review status"),
) -> None:
    """Print the BI report over every list."""
    lists = inspection_service.list_lists(_operator("cli"))
    result = aggregate(lists, top_n=top, status_filter=status)

    summary = Table(title="Summary")
    summary.add_column("Metric")
    summary.add_column("Value", justify="right")
    summary.add_row("Records", str(result.total_records))
    summary.add_row("New prospects", str(result.new_prospects))
    summary.add_row("Approved", str(result.status_counts.approved))
    summary.add_row("Rejected", str(result.status_counts.rejected))
    summary.add_row("Pending", str(result.status_counts.pending))
    summary.add_row("Establishments", str(result.establishments_count))
    summary.add_row("Cities", str(result.localities_count))
    rprint(summary)

    rprint(_ranking_table("Top establishments", result.top_establishments))
    rprint(_ranking_table("Top cities", result.top_localities))
    rprint(_ranking_table("Packaging manufacturers", result.manufacturer_share))
    rprint(_ranking_table("Molding", result.molding_distribution))

    if status is not None:
        table = Table(title=f"Records with status {status.value}")
        table.add_column("Record")
        table.add_column("Legal name")
        table.add_column("CNPJ")
        for record in result.filtered_records:
            table.add_row(record.id, record.attributes.legal_name, record.attributes.primary_tax_id)
        rprint(table)


@app.command("export")
def export(
    output_dir: Path = typer.Argument(Path("."), help="Directory for the export file"),
    fmt: str = typer.Option("xlsx", "--format", help="csv or xlsx"),
) -> None:
    """Write the master database spreadsheet."""
    if fmt not in ("csv", "xlsx"):
        typer.echo("Format must be csv or xlsx.")
        raise typer.Exit(code=1)
    df = build_dataframe(inspection_service.list_lists(_operator("cli")))
    path = output_dir / export_filename(fmt)
    if fmt == "csv":
        export_csv(df, path)
    else:
        export_excel(df, path)
    typer.echo(f"Exported {df.height} records to {path}")


@reference_app.command("show")
def reference_show() -> None:
    config = settings_service.load()
    typer.echo(f"IC email: {config.ic_email}")
    roots = sorted(config.reference_roots)
    typer.echo(f"Reference roots ({len(roots)}):")
    for root in roots:
        typer.echo(f"  {root}")


@reference_app.command("set")
def reference_set(
    file: Path = typer.Option(..., exists=True, readable=True, help="Text file with identifiers"),
    email: Optional[str] = typer.Option(None, help="Notification email; keeps the current one when omitted"),
    actor_id: str = typer.Option("cli", help="Administrator id recorded in the log"),
) -> None:
    """Replace the reference identifier base from a file."""
    current = settings_service.load()
    payload = UpdateSettingsPayload(
        ic_email=email or current.ic_email,
        reference_identifiers=file.read_text(encoding="utf-8"),
    )
    config = settings_service.save(payload, _operator(actor_id))
    typer.echo(f"Reference base updated ({len(config.reference_roots)} roots).")


if __name__ == "__main__":
    app()
