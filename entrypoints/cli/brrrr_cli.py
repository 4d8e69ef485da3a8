from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from brrrr.adapters.config import config
from brrrr.adapters.sql_repo import SqlDealRepository
from brrrr.adapters.storage import deals_to_frame, write_table
from brrrr.analysis.brrrr_batch import run_batch
from brrrr.services import deals as deal_service
from brrrr.services.report import generate_text_report

app = typer.Typer(help="BRRRR calculator: single deals, batches, saved-deal reports.")


def _repo(db_uri: Optional[str]) -> SqlDealRepository:
    return SqlDealRepository(db_uri or config.DB_URI)


@app.command()
def calculate(
    inputs_json: Path = typer.Argument(..., exists=True, help="JSON file with BRRRR inputs (camelCase keys)"),
    report: bool = typer.Option(True, "--report/--no-report", help="Print a text report after the JSON"),
    name: str = typer.Option("", help="Deal name used in the report header"),
    skip_validation: bool = typer.Option(False, "--skip-validation", help="Run the raw engine without form rules"),
) -> None:
    """
    Run the BRRRR model on one deal and print the results.
    """
    raw = json.loads(inputs_json.read_text())
    try:
        inputs, results = deal_service.analyze(raw, validate=not skip_validation)
    except ValueError as e:
        typer.secho(f"Invalid inputs: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(results.to_dict(), indent=2))
    if report:
        typer.echo("")
        typer.echo(generate_text_report(inputs, results, name or None))


@app.command()
def batch(
    input_path: Path = typer.Argument(..., exists=True, help="CSV/parquet with one deal per row"),
    output_path: Path = typer.Argument(..., help="Where to write inputs + result columns"),
) -> None:
    """
    Compute results for every row of a table of deals.
    """
    summary = run_batch(input_path, output_path)
    typer.echo(
        f"{summary.n_deals} deals | cash out ${summary.total_cash_out:,.0f} | "
        f"left in ${summary.total_left_in_deals:,.0f} | fully recycled {summary.n_full_recycle}"
    )


@app.command("list-deals")
def list_deals(
    limit: int = typer.Option(config.DEALS_DEFAULT_LIMIT, help="Max deals to show"),
    db_uri: Optional[str] = typer.Option(None, help="Override BRRRR_DB_URI"),
) -> None:
    """
    Saved deals, newest first.
    """
    for d in deal_service.list_deals(_repo(db_uri), limit=limit):
        roi = d["results"].get("postRefinanceROI", float("nan"))
        typer.echo(f"{d['id']:>5}  {d['deal_name']:<40}  post-refi ROI {roi:.1f}%  {d['created_at']:%Y-%m-%d}")


@app.command("export-deals")
def export_deals(
    output_path: Path = typer.Argument(..., help="CSV/parquet destination"),
    limit: int = typer.Option(1000, help="Max deals to export"),
    db_uri: Optional[str] = typer.Option(None, help="Override BRRRR_DB_URI"),
) -> None:
    """
    Dump saved deals (inputs + results) to a table.
    """
    rows = deal_service.list_deals(_repo(db_uri), limit=limit)
    written = write_table(deals_to_frame(rows), output_path)
    typer.echo(f"Wrote {len(rows)} deals to {written}")


@app.command()
def report(
    deal_id: int = typer.Argument(..., help="Saved deal id"),
    output: Optional[Path] = typer.Option(None, help="Write HTML here instead of printing text"),
    db_uri: Optional[str] = typer.Option(None, help="Override BRRRR_DB_URI"),
) -> None:
    """
    Render the report of a saved deal.
    """
    repo = _repo(db_uri)
    try:
        if output is None:
            typer.echo(deal_service.render_deal_report(repo, deal_id, fmt="text"))
            return
        html = deal_service.render_deal_report(repo, deal_id, fmt="html")
    except deal_service.DealNotFoundError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html)
    typer.echo(f"Wrote report to {output}")


if __name__ == "__main__":
    app()
