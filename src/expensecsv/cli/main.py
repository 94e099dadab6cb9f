"""Main CLI entry point."""

import dataclasses

import click

from expensecsv.cli.error_handling import handle_domain_error
from expensecsv.config import WorkerConfig, configure_logging
from expensecsv.domain.errors import ValidationError

# Import and register all commands at module level
from expensecsv.cli.commands import export_cmd, import_cmd, preview


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="EXPENSECSV_LOG_LEVEL",
    help="Logging level for diagnostics on stderr",
)
@click.option(
    "--export-chunk-size",
    type=int,
    help="Records per export chunk (overrides EXPENSECSV_EXPORT_CHUNK_SIZE)",
)
@click.option(
    "--import-chunk-size",
    type=int,
    help="Lines per import chunk (overrides EXPENSECSV_IMPORT_CHUNK_SIZE)",
)
@click.pass_context
def cli(ctx, log_level: str, export_chunk_size: int | None, import_chunk_size: int | None):
    """expensecsv - Expense CSV import and export.

    Converts expense records to CSV and validates CSV files back into
    expense records, reporting per-line errors without aborting.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    overrides = {}
    if export_chunk_size is not None:
        overrides["export_chunk_size"] = export_chunk_size
    if import_chunk_size is not None:
        overrides["import_chunk_size"] = import_chunk_size

    try:
        config = WorkerConfig.from_env()
        ctx.obj["config"] = dataclasses.replace(config, **overrides)
    except ValidationError as e:
        handle_domain_error(ctx, e)


# Register all commands
export_cmd.register_commands(cli)
import_cmd.register_commands(cli)
preview.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
