"""Service layer for the RideLink application."""
