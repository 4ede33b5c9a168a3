"""Command modules for the RideLink CLI."""

from ridelink.cli_module.commands.user_commands import user_group
from ridelink.cli_module.commands.trip_commands import trip_group
from ridelink.cli_module.commands.report_commands import report_group

__all__ = [
    'user_group',
    'trip_group',
    'report_group',
]
