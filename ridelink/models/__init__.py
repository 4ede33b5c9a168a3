"""Entity models for the RideLink application."""
from ridelink.models.location import Location, locations_match
from ridelink.models.outcome import Outcome
from ridelink.models.user import User, UserRole, DriverInfo, RiderInfo
from ridelink.models.trip import Trip, TripStatus


__all__ = [
    'Location',
    'locations_match',
    'Outcome',
    'User',
    'UserRole',
    'DriverInfo',
    'RiderInfo',
    'Trip',
    'TripStatus',
]
