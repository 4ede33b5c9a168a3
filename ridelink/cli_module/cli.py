"""Main CLI entry point for RideLink application."""

import logging

import click

# Set context settings to properly display help for all commands
CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
    "show_default": True
}

from ridelink.cli_module.utils import CONFIG_DIR, DATA_DIR_ENV, RideLinkContext
from ridelink.cli_module.commands.user_commands import user_group
from ridelink.cli_module.commands.trip_commands import trip_group
from ridelink.cli_module.commands.report_commands import report_group


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--data-dir", envvar=DATA_DIR_ENV, default=CONFIG_DIR,
              type=click.Path(file_okay=False), help="Directory holding users.csv and trips.csv")
@click.option("--verbose", "-v", is_flag=True, help="Show log messages")
@click.pass_context
def cli(ctx, data_dir, verbose):
    """RideLink CLI application for carpool matching."""
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    ctx.obj = RideLinkContext(data_dir)


# Register all command groups
cli.add_command(user_group)
cli.add_command(trip_group)
cli.add_command(report_group)


def main():
    """Entry point for the application."""
    cli()


if __name__ == '__main__':
    main()
