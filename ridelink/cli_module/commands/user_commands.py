"""User commands for the RideLink CLI."""

import click
from tabulate import tabulate

from ridelink.models.user import User, UserRole
from ridelink.services.storage_service import StorageServiceError
from ridelink.cli_module.utils import (RideLinkContext, SessionError, save_session, clear_session,
                                       require_role)


@click.group(name="user")
def user_group():
    """User registration and profile commands."""
    pass


def _register(ctx: RideLinkContext, user: User) -> None:
    outcome = ctx.matcher.register_user(user)
    if not outcome:
        click.echo(f"Error: {outcome.message}", err=True)
        return

    ctx.save()
    save_session(ctx.data_dir, user.id)
    click.echo(f"Welcome to RideLink, {user.name}!")
    click.echo(f"You're registered as a {user.role.value} with ID {user.id}.")
    click.echo("You are now logged in.")


@user_group.command(name="register-driver")
@click.option("--name", prompt=True, help="Your full name")
@click.option("--contact", prompt=True, help="Phone number or email")
@click.option("--age", prompt=True, type=click.IntRange(min=0), help="Your age")
@click.option("--gender", prompt=True, help="Your gender")
@click.option("--car-model", prompt=True, help="Model of your car")
@click.option("--car-plate", prompt=True, help="Your car's plate number")
@click.option("--capacity", prompt=True, type=click.IntRange(min=1),
              help="Seats in your car, including yours")
@click.option("--experience", prompt=True, type=click.IntRange(min=0), help="Years of driving experience")
@click.option("--id", "user_id", help="Use this ID instead of a generated one")
@click.pass_obj
def register_driver(ctx, name, contact, age, gender, car_model, car_plate, capacity, experience, user_id):
    """Register as a driver."""
    try:
        user_id = user_id or ctx.matcher.next_user_id(UserRole.DRIVER)
        driver = User.new_driver(user_id, name, contact, age, gender,
                                 car_model, car_plate, capacity, experience)
        _register(ctx, driver)
    except (StorageServiceError, SessionError) as e:
        click.echo(f"Error during registration: {str(e)}", err=True)


@user_group.command(name="register-rider")
@click.option("--name", prompt=True, help="Your full name")
@click.option("--contact", prompt=True, help="Phone number or email")
@click.option("--age", prompt=True, type=click.IntRange(min=0), help="Your age")
@click.option("--gender", prompt=True, help="Your gender")
@click.option("--payment-method", prompt=True, help="How you prefer to pay")
@click.option("--id", "user_id", help="Use this ID instead of a generated one")
@click.pass_obj
def register_rider(ctx, name, contact, age, gender, payment_method, user_id):
    """Register as a rider."""
    try:
        user_id = user_id or ctx.matcher.next_user_id(UserRole.RIDER)
        rider = User.new_rider(user_id, name, contact, age, gender, payment_method)
        _register(ctx, rider)
    except (StorageServiceError, SessionError) as e:
        click.echo(f"Error during registration: {str(e)}", err=True)


@user_group.command()
@click.argument("user_id")
@click.pass_obj
def login(ctx, user_id):
    """Select the user to act as."""
    try:
        user = ctx.matcher.get_user_by_id(user_id)
        if user is None:
            click.echo("User ID not found. Please check and try again.", err=True)
            return

        save_session(ctx.data_dir, user.id)
        click.echo(f"Login successful! Welcome back, {user.name}!")
    except (StorageServiceError, SessionError) as e:
        click.echo(f"Error during login: {str(e)}", err=True)


@user_group.command()
@click.pass_obj
def logout(ctx):
    """Forget the selected user."""
    if clear_session(ctx.data_dir):
        click.echo("You have been logged out.")
    else:
        click.echo("You were not logged in.")


@user_group.command()
@click.pass_obj
def whoami(ctx):
    """Show the selected user."""
    try:
        user = ctx.current_user()
    except StorageServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    if user is None:
        click.echo("You are not logged in.")
        return
    click.echo(str(user))


@user_group.command()
@require_role([UserRole.DRIVER, UserRole.RIDER])
@click.pass_obj
def stats(ctx):
    """View your profile and carpool statistics."""
    user = ctx.current_user()

    rows = [
        ["ID", user.id],
        ["Name", user.name],
        ["Role", user.role.value],
        ["Contact", user.contact_info],
        ["Age", user.age],
        ["Gender", user.gender],
        ["Rating", f"{user.rating:.1f}/5.0 ({user.rating_count} ratings)"],
    ]

    if user.is_driver:
        info = user.driver_info
        rows.extend([
            ["Car", f"{info.car_model} ({info.car_plate_number})"],
            ["Capacity", f"{info.car_capacity} seats"],
            ["Experience", f"{info.years_experience} years"],
            ["Trips posted", len(ctx.matcher.get_trips_for_driver(user.id))],
        ])
    else:
        info = user.rider_info
        rows.extend([
            ["Payment", info.preferred_payment_method],
            ["Money saved", f"GHS {info.total_money_saved:.2f}"],
            ["Distance commuted", f"{info.total_distance_commuted:.2f} km"],
            ["Saved per km", f"GHS {info.average_saving_per_km:.2f}"],
            ["Trips joined", len(ctx.matcher.get_trips_for_rider(user.id))],
        ])

    click.echo(tabulate(rows, tablefmt="pretty"))


@user_group.command()
@click.argument("user_id")
@click.argument("score", type=float)
@click.pass_obj
def rate(ctx, user_id, score):
    """Rate another user from 0.0 to 5.0."""
    try:
        user = ctx.matcher.get_user_by_id(user_id)
        if user is None:
            click.echo("User ID not found.", err=True)
            return

        outcome = user.update_rating(score)
        if not outcome:
            click.echo(f"Error: {outcome.message}", err=True)
            return

        ctx.save()
        click.echo(f"Thanks! {user.name} is now rated {user.rating:.1f}/5.0.")
    except StorageServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)


@user_group.command(name="list")
@click.option("--role", type=click.Choice([role.value for role in UserRole], case_sensitive=False),
              help="Only show users with this role")
@click.pass_obj
def list_users(ctx, role):
    """List registered users."""
    try:
        users = ctx.matcher.get_all_users()
    except StorageServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    if role:
        users = [user for user in users if user.role.value.lower() == role.lower()]

    if not users:
        click.echo("No users registered yet.")
        return

    table_data = [[user.id, user.role.value, user.name, user.contact_info, f"{user.rating:.1f}"]
                  for user in users]
    click.echo(tabulate(table_data, headers=["ID", "Role", "Name", "Contact", "Rating"],
                        tablefmt="pretty"))
