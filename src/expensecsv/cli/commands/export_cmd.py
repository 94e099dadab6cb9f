"""CSV export command."""

from pathlib import Path

import click

from expensecsv.cli.error_handling import handle_domain_error
from expensecsv.cli.input_files import load_json_list
from expensecsv.cli.worker_runner import run_in_worker
from expensecsv.domain.errors import ValidationError
from expensecsv.worker.messages import ERROR, EXPORT_CSV


@click.command("export")
@click.argument("expenses_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--categories",
    "categories_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with categories ({id, name} objects)",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write CSV here instead of stdout")
@click.option("--no-headers", is_flag=True, help="Omit the header row")
@click.pass_context
def export_csv(ctx, expenses_file: str, categories_file: str | None, output: str | None, no_headers: bool):
    """Export expenses from a JSON file to CSV."""
    config = ctx.obj["config"]

    try:
        expenses = load_json_list(expenses_file, "expenses")
        categories = load_json_list(categories_file, "categories") if categories_file else []
    except ValidationError as e:
        handle_domain_error(ctx, e)

    result = run_in_worker(
        config,
        {
            "type": EXPORT_CSV,
            "data": {
                "expenses": expenses,
                "categories": categories,
                "includeHeaders": not no_headers,
            },
        },
        label="Exporting",
    )

    if result["type"] == ERROR:
        handle_domain_error(ctx, result["error"])

    if output:
        Path(output).write_text(result["csvContent"], encoding="utf-8")
        click.echo(f"Exported {result['totalRecords']} expenses to {output}")
    else:
        click.echo(result["csvContent"], nl=False)


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_csv)
