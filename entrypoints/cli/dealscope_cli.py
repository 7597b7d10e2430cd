from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from dealscope.adapters.config import config
from dealscope.adapters.sql_repo import SqlDealRepository, SqlPropertyRepository
from dealscope.services.deal_analyzer import EXAMPLE_DEAL, analyze_deal
from dealscope.services.export import export_properties
from dealscope.services.formatting import format_currency, format_percentage
from dealscope.services.importer import import_file

app = typer.Typer(help="Dealscope deal underwriting and portfolio tools.")


def _print_analysis(result: dict) -> None:
    m = result["metrics"]
    typer.echo(f"Verdict: {result['verdict_text']}")
    typer.echo(f"  Total investment: {format_currency(m['totalInvestment'])}")
    typer.echo(f"  Net proceeds:     {format_currency(m['netProceeds'])}")
    typer.echo(f"  Profit:           {format_currency(m['profit'])}")
    typer.echo(f"  ROI:              {format_percentage(m['roi'])}")
    typer.echo(f"  IRR:              {format_percentage(m['irr'])}")
    typer.echo(f"  LTV:              {format_percentage(m['ltv'])}")
    typer.echo(f"  Discount:         {format_percentage(m['discount'])}")
    for r in result["risk_factors"]:
        typer.echo(f"  {r['name']}: {r['level']} ({r['percentage']:.0f}%) - {r['description']}")
    for flag in result["guardrails"]["flags"]:
        typer.echo(f"  [{flag['severity']}] {flag['code']}: {flag['message']}")
    if "deal_id" in result:
        typer.echo(f"Saved as deal {result['deal_id']}")


@app.command()
def analyze(
    deal_json: Optional[Path] = typer.Option(
        None, "--deal-json", help="JSON file with deal inputs (camelCase or snake_case)"
    ),
    bpo_value: Optional[str] = typer.Option(None, "--bpo", help="Broker's price opinion"),
    strike_price: Optional[str] = typer.Option(None, "--strike", help="Acquisition price"),
    rehab_costs: Optional[str] = typer.Option(None, "--rehab", help="Rehab budget"),
    hold_period: Optional[str] = typer.Option(None, "--hold", help="Hold period in months"),
    sale_price: Optional[str] = typer.Option(None, "--sale", help="Expected sale price"),
    address: str = typer.Option("", help="Property address"),
    property_type: Optional[str] = typer.Option(None, "--type", help="Property type"),
    units: Optional[str] = typer.Option(None, help="Number of units"),
    save: bool = typer.Option(False, "--save", help="Persist the analysis to DB_URI"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw analysis as JSON"),
) -> None:
    """
    Underwrite one deal. Options override values from --deal-json.
    """
    payload: dict = {}
    if deal_json is not None:
        payload.update(json.loads(deal_json.read_text()))

    overrides = {
        "bpo_value": bpo_value,
        "strike_price": strike_price,
        "rehab_costs": rehab_costs,
        "hold_period": hold_period,
        "sale_price": sale_price,
        "property_type": property_type,
        "units": units,
    }
    payload.update({k: v for k, v in overrides.items() if v is not None})
    if address:
        payload["address"] = address

    repo = SqlDealRepository(config.DB_URI) if save else None
    try:
        result = analyze_deal(payload, repo=repo, save=save)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result, indent=2, default=str))
    else:
        _print_analysis(result)


@app.command()
def example(
    as_json: bool = typer.Option(False, "--json", help="Print the raw analysis as JSON"),
) -> None:
    """
    Analyze the built-in reference deal.
    """
    result = analyze_deal(dict(EXAMPLE_DEAL))
    if as_json:
        typer.echo(json.dumps(result, indent=2, default=str))
    else:
        typer.echo(EXAMPLE_DEAL["address"])
        _print_analysis(result)


@app.command("import-file")
def import_file_cmd(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV or XLSX file"),
    batch_size: Optional[int] = typer.Option(
        None, help="Rows per upsert batch (default: IMPORT_BATCH_SIZE)"
    ),
) -> None:
    """
    Import properties from a spreadsheet, auto-mapping its headers.
    """
    repo = SqlPropertyRepository(config.DB_URI)
    try:
        result = import_file(path, repo, batch_size=batch_size)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Imported {result.success} row(s), {result.failed} failed")
    for err in result.errors:
        typer.echo(f"  {err}")


@app.command()
def export(
    out_dir: Path = typer.Option(Path("."), help="Directory to write the export into"),
    fmt: str = typer.Option("csv", "--format", help="csv or xlsx"),
    filename: Optional[str] = typer.Option(None, help="File name without extension"),
) -> None:
    """
    Export active properties to CSV or Excel.
    """
    if fmt not in ("csv", "xlsx"):
        typer.echo("Error: --format must be csv or xlsx", err=True)
        raise typer.Exit(code=2)

    repo = SqlPropertyRepository(config.DB_URI)
    path = export_properties(repo.list_active(), out_dir, filename=filename, fmt=fmt)
    if path is None:
        typer.echo("No data to export")
        raise typer.Exit(code=1)
    typer.echo(f"Wrote {path}")


if __name__ == "__main__":
    app()
