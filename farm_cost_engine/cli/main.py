"""
CLI interface for the farm cost engine.

Runs cost and report calculations on exported YAML datasets.
"""

import logging
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from farm_cost_engine.config.loader import load_report_config
from farm_cost_engine.core.costing import (
    calculate_weighted_average_price,
    ensure_consumption_costs,
)
from farm_cost_engine.core.formatting import format_currency, format_quantity
from farm_cost_engine.core.livestock import calculate_max_concurrent_count
from farm_cost_engine.core.locale import get_locale
from farm_cost_engine.core.pivot import PivotTableData, build_pivot_table
from farm_cost_engine.core.pricing import find_applicable_price_tier
from farm_cost_engine.storage.dataset import load_dataset, parse_date

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging"
    )
):
    """Farm cost engine CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        console.print("Farm Cost Engine - Use --help to see available commands")


@app.command()
def price(
    dataset: str = typer.Argument(..., help="Path to YAML dataset"),
    feed_type_id: str = typer.Argument(..., help="Feed type to look up"),
    on: str = typer.Argument(..., help="Day in ISO format (YYYY-MM-DD)"),
    locale: str = typer.Option("en", "--locale", "-l", help="Number format locale")
):
    """Show the unit price that applied to a feed type on a given day."""
    try:
        data = load_dataset(dataset)
        report_locale = get_locale(locale)
        day = parse_date(on, "date")
        tier = find_applicable_price_tier(feed_type_id, day, data.price_tiers)

        if tier is None:
            console.print(f"[yellow]No price tier for {feed_type_id} on {day.isoformat()}[/]")
            sys.exit(EXIT_CODE_PASS)

        valid_to = tier.valid_to.isoformat() if tier.valid_to else "open"
        console.print(
            f"{feed_type_id} on {day.isoformat()}: "
            f"[bold]{format_currency(tier.price_per_unit, 3, report_locale)}[/] per unit "
            f"(valid {tier.valid_from.isoformat()} to {valid_to})"
        )
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command("weighted-average")
def weighted_average(
    dataset: str = typer.Argument(..., help="Path to YAML dataset"),
    feed_type: Optional[str] = typer.Option(
        None,
        "--feed-type",
        "-f",
        help="Restrict to a single feed type"
    ),
    locale: str = typer.Option("en", "--locale", "-l", help="Number format locale")
):
    """Show the cost-weighted average unit price of the consumption."""
    try:
        data = load_dataset(dataset)
        report_locale = get_locale(locale)
        records = ensure_consumption_costs(data.consumption, data.price_tiers)
        if feed_type:
            records = [record for record in records if record.feed_type_id == feed_type]

        total_quantity = sum(record.quantity for record in records)
        total_cost = sum(record.cost or 0.0 for record in records)
        average = calculate_weighted_average_price(records)

        console.print(f"Records: {len(records)}")
        console.print(f"Total quantity: {format_quantity(total_quantity, report_locale)}")
        console.print(f"Total cost: {format_currency(total_cost, 2, report_locale)}")
        console.print(
            f"Weighted average price: [bold]{format_currency(average, 3, report_locale)}[/]"
        )
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def pivot(
    dataset: str = typer.Argument(..., help="Path to YAML dataset"),
    config: str = typer.Argument(..., help="Path to YAML report configuration")
):
    """Build a pivot table from the dataset's consumption."""
    try:
        data = load_dataset(dataset)
        report_config = load_report_config(config)
        records = ensure_consumption_costs(data.consumption, data.price_tiers)
        table = build_pivot_table(records, report_config.pivot, report_config.locale)
        _display_pivot_table(table, [dim.value for dim in report_config.pivot.rows])
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command("max-animals")
def max_animals(
    dataset: str = typer.Argument(..., help="Path to YAML dataset")
):
    """Show the maximum number of animals present at the same time."""
    try:
        data = load_dataset(dataset)
        if data.cycle is None:
            raise ValueError("Dataset has no 'cycle' section")

        peak = calculate_max_concurrent_count(
            data.animal_counts, data.cycle.start_date, data.cycle.end_date
        )
        end = data.cycle.end_date.isoformat() if data.cycle.end_date else "ongoing"
        console.print(f"Cycle: {data.cycle.start_date.isoformat()} to {end}")
        console.print(f"Maximum animals at any time: [bold]{peak:,}[/]")
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


def _display_pivot_table(table: PivotTableData, row_titles: List[str]):
    """Render a pivot table with stacked column headers."""
    if not table.rows:
        console.print("\n[dim]No consumption data to report.[/]")
        return

    result = Table(show_lines=False)
    for title in row_titles or [""]:
        result.add_column(title, style="bold")
    for i in range(len(table.column_keys)):
        header = "\n".join(row[i] for row in table.column_headers if i < len(row))
        result.add_column(header, justify="right")

    row_padding = max(len(row_titles), 1)
    for row in table.rows:
        labels = list(row.dimensions.values())
        labels += [""] * (row_padding - len(labels))
        values = [
            row.cells[key].formatted_value if key in row.cells else ""
            for key in table.column_keys
        ]
        style = "italic" if row.is_subtotal else None
        result.add_row(*labels, *values, style=style)

    if table.grand_totals is not None:
        labels = ["Total"] + [""] * (row_padding - 1)
        values = [
            table.grand_totals[key].formatted_value if key in table.grand_totals else ""
            for key in table.column_keys
        ]
        result.add_row(*labels, *values, style="bold")

    console.print(result)


if __name__ == "__main__":
    app()
