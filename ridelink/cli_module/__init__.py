"""Command line interface for RideLink."""
