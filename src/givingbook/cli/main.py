"""Main CLI entry point."""

import logging

import click
from givingbook.database.factories import create_sqlite_store
from givingbook.logging_config import configure_logging

# Import and register all commands at module level
from givingbook.cli.commands import (
    member,
    giving,
    summary,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides GIVINGBOOK_DB_PATH environment variable)",
    envvar="GIVINGBOOK_DB_PATH",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Givingbook - Church giving records.

    Keep the member registry, record tithes and offerings per service,
    reconcile the cash count and review monthly summaries.
    """
    ctx.ensure_object(dict)
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)

    # Open the store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        store.initialize_schema()
        ctx.obj["store"] = store


# Register all commands
member.register_commands(cli)
giving.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
