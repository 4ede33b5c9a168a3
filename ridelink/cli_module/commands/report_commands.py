"""Report commands for the RideLink CLI."""

import click
from tabulate import tabulate

from ridelink.services.storage_service import StorageServiceError


@click.group(name="report")
def report_group():
    """System reports."""
    pass


@report_group.command(name="impact")
@click.pass_obj
def impact_report(ctx):
    """View usage and savings across the whole system."""
    try:
        report = ctx.matcher.get_system_impact_report()
    except StorageServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo("RIDELINK SYSTEM IMPACT REPORT\n")
    click.echo(tabulate([
        ["Total users", report.total_users],
        ["- Drivers", report.drivers],
        ["- Riders", report.riders],
        ["Total trips", report.total_trips],
        ["- Pending", report.pending_trips],
        ["- Active", report.active_trips],
        ["- Completed", report.completed_trips],
        ["Money saved by riders", f"GHS {report.total_money_saved:.2f}"],
    ], tablefmt="pretty"))
