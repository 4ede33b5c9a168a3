"""Trip commands for the RideLink CLI."""

from typing import List

import click
from tabulate import tabulate

from ridelink.models.location import Location
from ridelink.models.trip import Trip
from ridelink.models.user import UserRole
from ridelink.services.matcher_service import MatcherService
from ridelink.services.storage_service import StorageServiceError
from ridelink.cli_module.utils import DATETIME_FORMAT, format_time, require_role

DATETIME_TYPE = click.DateTime(formats=[DATETIME_FORMAT])


@click.group(name="trip")
def trip_group():
    """Trip posting, searching and lifecycle commands."""
    pass


def _trip_rows(trips: List[Trip], matcher: MatcherService) -> List[list]:
    table_data = []
    for trip in trips:
        driver = matcher.get_user_by_id(trip.driver_id)
        table_data.append([
            trip.id,
            trip.status.value,
            f"{trip.origin} → {trip.destination}",
            format_time(trip.departure_time),
            driver.name if driver else trip.driver_id,
            f"{trip.seats_available}/{trip.seat_limit}",
            f"GHS {trip.fare_per_person():.2f}",
        ])
    return table_data


def _show_trips(trips: List[Trip], matcher: MatcherService) -> None:
    click.echo(tabulate(
        _trip_rows(trips, matcher),
        headers=["Trip ID", "Status", "Route", "Departure", "Driver", "Seats", "Fare/person"],
        tablefmt="pretty"
    ))


@trip_group.command(name="post")
@click.option("--origin-name", prompt="Origin name", help="Where the trip starts")
@click.option("--origin-area", prompt="Origin zone/area", help="Zone of the starting point")
@click.option("--dest-name", prompt="Destination name", help="Where the trip ends")
@click.option("--dest-area", prompt="Destination zone/area", help="Zone of the destination")
@click.option("--departure", prompt="Departure (yyyy-MM-dd HH:mm)", type=DATETIME_TYPE,
              help="Departure date and time")
@require_role([UserRole.DRIVER])
@click.pass_obj
def post_trip(ctx, origin_name, origin_area, dest_name, dest_area, departure):
    """Post a new trip as a driver."""
    try:
        driver = ctx.current_user()
        trip = Trip.for_driver(
            ctx.matcher.next_trip_id(),
            driver,
            Location(origin_name, origin_area),
            Location(dest_name, dest_area),
            departure,
        )
        ctx.matcher.post_trip(trip)
        ctx.save()
    except StorageServiceError as e:
        click.echo(f"Error creating trip: {str(e)}", err=True)
        return

    click.echo("\nTrip posted successfully!")
    click.echo(f"Trip ID: {trip.id}")
    click.echo(f"Route: {trip.origin.name} -> {trip.destination.name}")
    click.echo(f"Departure: {format_time(trip.departure_time)}")
    click.echo(f"Estimated fare per person: GHS {trip.fare_per_person():.2f}")


@trip_group.command(name="list")
@click.option("--available", "scope", flag_value="available", help="Only pending trips with free seats")
@click.option("--mine", "scope", flag_value="mine", help="Only trips you drive or joined")
@click.pass_obj
def list_trips(ctx, scope):
    """List posted trips."""
    try:
        matcher = ctx.matcher
        if scope == "available":
            trips = matcher.get_available_trips()
        elif scope == "mine":
            user = ctx.current_user()
            if user is None:
                click.echo("You are not logged in.", err=True)
                return
            if user.is_driver:
                trips = matcher.get_trips_for_driver(user.id)
            else:
                trips = matcher.get_trips_for_rider(user.id)
        else:
            trips = matcher.get_all_trips()
    except StorageServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    if not trips:
        click.echo("No trips found. Check back later!")
        return

    _show_trips(trips, matcher)


@trip_group.command(name="search")
@click.option("--origin-name", prompt="Origin name", help="Where you are starting from")
@click.option("--origin-area", prompt="Origin zone", help="Zone you are starting from")
@click.option("--dest-name", prompt="Destination name", help="Where you want to go")
@click.option("--dest-area", prompt="Destination zone", help="Zone you want to go to")
@click.option("--time", "desired_time", prompt="When do you want to travel? (yyyy-MM-dd HH:mm)",
              type=DATETIME_TYPE, help="Desired departure time")
@click.pass_obj
def search_trips(ctx, origin_name, origin_area, dest_name, dest_area, desired_time):
    """Search for trips matching your route and time."""
    try:
        matches = ctx.matcher.find_matches(
            Location(origin_name, origin_area),
            Location(dest_name, dest_area),
            desired_time,
        )
    except StorageServiceError as e:
        click.echo(f"Error during search: {str(e)}", err=True)
        return

    if not matches:
        click.echo("Sorry, no matching trips found.")
        click.echo("Try adjusting your search or check back later!")
        return

    click.echo(f"Found {len(matches)} matching trip(s)!")
    _show_trips(matches, ctx.matcher)
    click.echo("\nUse 'ridelink trip join <trip_id>' to join one of them.")


@trip_group.command(name="join")
@click.argument("trip_id")
@require_role([UserRole.RIDER])
@click.pass_obj
def join_trip(ctx, trip_id):
    """Join a pending trip as a rider."""
    try:
        rider = ctx.current_user()
        trip = ctx.matcher.get_trip_by_id(trip_id)
        if trip is None:
            click.echo("Trip not found!", err=True)
            return

        outcome = ctx.matcher.admit_rider(trip_id, rider.id)
        if not outcome:
            click.echo(f"Error: {outcome.message}", err=True)
            return
        ctx.save()
    except StorageServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    driver = ctx.matcher.get_user_by_id(trip.driver_id)
    click.echo("Successfully joined the trip!")
    if driver is not None:
        click.echo(f"Driver: {driver.name}")
        click.echo(f"Contact: {driver.contact_info}")
    click.echo(f"Fare: GHS {trip.fare_per_person():.2f}")


def _transition(ctx, trip_id: str, action: str) -> None:
    try:
        driver = ctx.current_user()
        trip = ctx.matcher.get_trip_by_id(trip_id)
        if trip is None:
            click.echo("Trip not found!", err=True)
            return
        if not trip.is_driven_by(driver.id):
            click.echo(f"You can only {action} your own trips!", err=True)
            return

        if action == "start":
            outcome = ctx.matcher.start_trip(trip_id, driver.id)
        else:
            outcome = ctx.matcher.complete_trip(trip_id, driver.id)

        if not outcome:
            click.echo(f"Cannot {action} trip - current status: {trip.status.value}", err=True)
            return
        ctx.save()
    except StorageServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    if action == "start":
        click.echo(f"Trip {trip.id} has started! Drive safe!")
    else:
        click.echo(f"Trip {trip.id} completed successfully!")
        click.echo(f"Each of {trip.passenger_count} passenger(s) paid GHS {trip.fare_per_person():.2f}.")


@trip_group.command(name="start")
@click.argument("trip_id")
@require_role([UserRole.DRIVER])
@click.pass_obj
def start_trip(ctx, trip_id):
    """Start one of your pending trips."""
    _transition(ctx, trip_id, "start")


@trip_group.command(name="complete")
@click.argument("trip_id")
@require_role([UserRole.DRIVER])
@click.pass_obj
def complete_trip(ctx, trip_id):
    """Complete one of your active trips."""
    _transition(ctx, trip_id, "complete")


@trip_group.command(name="show")
@click.argument("trip_id")
@click.pass_obj
def show_trip(ctx, trip_id):
    """Show the details of a trip."""
    try:
        trip = ctx.matcher.get_trip_by_id(trip_id)
    except StorageServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    if trip is None:
        click.echo("Trip not found!", err=True)
        return

    driver = ctx.matcher.get_user_by_id(trip.driver_id)
    click.echo(f"Trip {trip.id} [{trip.status.value}]")
    click.echo(f"  Route: {trip.origin.name} -> {trip.destination.name} ({trip.trip_distance_km:.2f} km)")
    click.echo(f"  Departure: {trip.departure_time:%b %d, %Y %H:%M}")
    if driver is not None:
        click.echo(f"  Driver: {driver.name} ({driver.profile.car_model}) - Rating: {driver.rating:.1f}/5.0")
    click.echo(f"  Seats: {trip.seats_available}/{trip.seat_limit} available")
    click.echo(f"  Fare per person: GHS {trip.fare_per_person():.2f}")

    if trip.passenger_ids:
        click.echo("  Passengers:")
        for passenger_id in trip.passenger_ids:
            passenger = ctx.matcher.get_user_by_id(passenger_id)
            click.echo(f"    - {passenger.name if passenger else passenger_id}")
