"""CSV preview command."""

import click

from expensecsv.cli.error_handling import handle_domain_error
from expensecsv.cli.input_files import read_csv_text
from expensecsv.cli.worker_runner import run_in_worker
from expensecsv.worker.messages import ERROR, PARSE_CSV


@click.command("preview")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def preview_csv(ctx, csv_file: str):
    """Show the headers and first lines of a CSV file."""
    config = ctx.obj["config"]

    result = run_in_worker(
        config,
        {"type": PARSE_CSV, "data": {"csvContent": read_csv_text(csv_file)}},
        label="Reading",
    )

    if result["type"] == ERROR:
        handle_domain_error(ctx, result["error"])

    click.echo(f"Headers: {', '.join(result['headers'])}")
    click.echo(f"Data lines: {result['totalLines']}")
    click.echo("Preview:")
    for line in result["preview"]:
        click.echo(f"  {line}")


def register_commands(cli):
    """Register preview command with main CLI."""
    cli.add_command(preview_csv)
