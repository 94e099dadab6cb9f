"""CSV import command."""

import json
from pathlib import Path

import click

from expensecsv.cli.error_handling import handle_domain_error
from expensecsv.cli.input_files import load_json_list, read_csv_text
from expensecsv.cli.worker_runner import run_in_worker
from expensecsv.domain.errors import ValidationError
from expensecsv.worker.messages import ERROR, IMPORT_CSV


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--categories",
    "categories_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with categories ({id, name} objects)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write accepted expenses as JSON to this file",
)
@click.pass_context
def import_csv(ctx, csv_file: str, categories_file: str | None, output: str | None):
    """Validate expenses from a CSV file."""
    config = ctx.obj["config"]

    try:
        categories = load_json_list(categories_file, "categories") if categories_file else []
    except ValidationError as e:
        handle_domain_error(ctx, e)

    result = run_in_worker(
        config,
        {
            "type": IMPORT_CSV,
            "data": {"csvContent": read_csv_text(csv_file), "categories": categories},
        },
        label="Importing",
    )

    if result["type"] == ERROR:
        handle_domain_error(ctx, result["error"])

    if output:
        Path(output).write_text(
            json.dumps({"expenses": result["expenses"]}, indent=2), encoding="utf-8"
        )

    click.echo("\nImport complete:")
    click.echo(f"  Lines: {result['totalLines']}")
    click.echo(f"  Imported: {result['successCount']} expenses")
    if result["errors"]:
        click.echo(f"  Errors: {result['errorCount']}")
        for error in result["errors"]:
            click.echo(f"    Line {error['line']}: {error['message']}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
