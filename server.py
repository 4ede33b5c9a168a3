#!/usr/bin/env python3
"""
Management script for the RideLink HTTP server.
"""

import os
import shutil
import logging

import click

from ridelink.api import create_app
from ridelink.cli_module.utils import CONFIG_DIR, DATA_DIR_ENV
from ridelink.services.storage_service import USERS_FILE, TRIPS_FILE


@click.group()
def cli():
    """RideLink server management CLI."""
    logging.basicConfig(level=logging.INFO)


@cli.command()
@click.option('--port', default=3000, help='Port to run the server on')
@click.option('--host', default='0.0.0.0', help='Interface to bind')
@click.option('--data-dir', envvar=DATA_DIR_ENV, default=CONFIG_DIR, help='Directory holding the CSV files')
def start(port, host, data_dir):
    """Start the HTTP server."""
    click.echo(f"Starting RideLink server on port {port}...")
    click.echo(f"Using data directory: {data_dir}")

    app = create_app(data_dir=data_dir)
    app.run(host=host, port=port, threaded=True)


@cli.command()
@click.option('--data-dir', envvar=DATA_DIR_ENV, default=CONFIG_DIR, help='Directory holding the CSV files')
def reset(data_dir):
    """Reset the data files to an empty state."""
    found = False
    for name in (USERS_FILE, TRIPS_FILE):
        path = os.path.join(data_dir, name)
        if not os.path.exists(path):
            continue
        found = True
        backup_path = f"{path}.bak"
        shutil.copyfile(path, backup_path)
        os.remove(path)
        click.echo(f"Removed {path}. Backup created at {backup_path}")

    if not found:
        click.echo(f"No data files found in: {data_dir}")


if __name__ == '__main__':
    cli()
