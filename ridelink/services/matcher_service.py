"""Matching and registry service for RideLink application."""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List, Optional

from ridelink.models.location import Location, locations_match
from ridelink.models.outcome import Outcome
from ridelink.models.trip import Trip, TripStatus
from ridelink.models.user import User, UserRole
from ridelink.services.id_service import generate_id, DRIVER_PREFIX, RIDER_PREFIX, TRIP_PREFIX

logger = logging.getLogger(__name__)

# Largest gap between desired and actual departure for a match
MAX_TIME_DIFF_MINUTES = 30


@dataclass
class SystemImpactReport:
    """
    Snapshot of registry usage.

    Attributes:
        total_users: Registered users of any role
        drivers: Registered drivers
        riders: Registered riders
        total_trips: Posted trips of any status
        pending_trips: Trips waiting to start
        active_trips: Trips under way
        completed_trips: Finished trips
        total_money_saved: Savings summed over all riders
    """
    total_users: int = 0
    drivers: int = 0
    riders: int = 0
    total_trips: int = 0
    pending_trips: int = 0
    active_trips: int = 0
    completed_trips: int = 0
    total_money_saved: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, truncated toward zero."""
    return int((end - start).total_seconds() / 60)


class MatcherService:
    """
    In-memory registry of users and trips.

    The service owns every user and trip for a session. Both collections are
    append-only and keep insertion order. Nothing here is thread-safe;
    callers sharing one instance across threads must serialise access.
    """

    def __init__(self, users: Optional[List[User]] = None, trips: Optional[List[Trip]] = None):
        self._users: List[User] = []
        self._trips: List[Trip] = []
        for user in users or []:
            self.register_user(user)
        for trip in trips or []:
            self.post_trip(trip)

    # Registration

    def register_user(self, user: User) -> Outcome:
        """
        Register a new user.

        Args:
            user: Driver or rider to add

        Returns:
            Outcome: OK, or DUPLICATE_ID if the ID is already taken
        """
        if self.get_user_by_id(user.id) is not None:
            logger.warning(f"User ID {user.id} already exists")
            return Outcome.DUPLICATE_ID

        self._users.append(user)
        logger.info(f"Registered {user.name} as a {user.role.value} with ID {user.id}")
        return Outcome.OK

    def post_trip(self, trip: Trip) -> Outcome:
        """Add a trip to the registry. Trips are accepted unconditionally."""
        self._trips.append(trip)
        logger.info(f"Trip {trip.id} posted: {trip.origin.name} -> {trip.destination.name}")
        return Outcome.OK

    def next_user_id(self, role: UserRole) -> str:
        """Generate an unused ID for a new user of ``role``."""
        prefix = DRIVER_PREFIX if role == UserRole.DRIVER else RIDER_PREFIX
        return generate_id(prefix, (user.id for user in self._users))

    def next_trip_id(self) -> str:
        """Generate an unused ID for a new trip."""
        return generate_id(TRIP_PREFIX, (trip.id for trip in self._trips))

    # Queries

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        for user in self._users:
            if user.id == user_id:
                return user
        return None

    def get_trip_by_id(self, trip_id: str) -> Optional[Trip]:
        for trip in self._trips:
            if trip.id == trip_id:
                return trip
        return None

    def get_all_users(self) -> List[User]:
        return list(self._users)

    def get_all_trips(self) -> List[Trip]:
        return list(self._trips)

    def get_user_index(self) -> Dict[str, User]:
        """Get all users keyed by ID."""
        return {user.id: user for user in self._users}

    def get_trips_for_driver(self, driver_id: str) -> List[Trip]:
        """Get every trip posted by a driver."""
        return [trip for trip in self._trips if trip.is_driven_by(driver_id)]

    def get_trips_for_rider(self, rider_id: str) -> List[Trip]:
        """Get every trip a rider has joined."""
        return [trip for trip in self._trips if trip.has_passenger(rider_id)]

    def get_available_trips(self) -> List[Trip]:
        """Get pending trips that still have a free seat."""
        return [trip for trip in self._trips if trip.is_pending and trip.has_free_seat]

    def find_matches(self, rider_origin: Location, rider_destination: Location,
                     desired_time: datetime) -> List[Trip]:
        """
        Find trips a rider could join.

        A trip matches when it is pending, has a free seat, both of its
        endpoints match the rider's, and it departs within
        MAX_TIME_DIFF_MINUTES of the desired time. Results keep the order
        trips were posted in.

        Args:
            rider_origin: Where the rider starts
            rider_destination: Where the rider wants to go
            desired_time: When the rider wants to leave

        Returns:
            List[Trip]: Matching trips
        """
        logger.info(f"Searching for trips from {rider_origin} to {rider_destination} "
                    f"around {desired_time:%Y-%m-%d %H:%M}")

        matches = []
        for trip in self.get_available_trips():
            if not locations_match(rider_origin, trip.origin):
                continue
            if not locations_match(rider_destination, trip.destination):
                continue
            if abs(minutes_between(desired_time, trip.departure_time)) <= MAX_TIME_DIFF_MINUTES:
                matches.append(trip)

        logger.info(f"Found {len(matches)} matching trip(s)")
        return matches

    # Lifecycle

    def admit_rider(self, trip_id: str, user_id: str) -> Outcome:
        """
        Add a registered user to a trip.

        Returns:
            Outcome: NOT_FOUND for unknown IDs, otherwise the trip's answer
        """
        trip = self.get_trip_by_id(trip_id)
        user = self.get_user_by_id(user_id)
        if trip is None or user is None:
            return Outcome.NOT_FOUND

        outcome = trip.admit_rider(user)
        if not outcome:
            logger.warning(f"Could not add {user_id} to trip {trip_id}: {outcome.name}")
        return outcome

    def start_trip(self, trip_id: str, user_id: Optional[str] = None) -> Outcome:
        """
        Start a trip.

        When ``user_id`` is given it must be the trip's driver.
        """
        trip = self.get_trip_by_id(trip_id)
        if trip is None:
            return Outcome.NOT_FOUND
        if user_id is not None and not trip.is_driven_by(user_id):
            logger.warning(f"User {user_id} tried to start trip {trip_id} they do not drive")
            return Outcome.INVALID_TRANSITION
        return trip.start()

    def complete_trip(self, trip_id: str, user_id: Optional[str] = None) -> Outcome:
        """
        Complete a trip and settle rider savings.

        When ``user_id`` is given it must be the trip's driver.
        """
        trip = self.get_trip_by_id(trip_id)
        if trip is None:
            return Outcome.NOT_FOUND
        if user_id is not None and not trip.is_driven_by(user_id):
            logger.warning(f"User {user_id} tried to complete trip {trip_id} they do not drive")
            return Outcome.INVALID_TRANSITION
        return trip.complete(self.get_user_index())

    # Reporting

    def get_system_impact_report(self) -> SystemImpactReport:
        """Summarise users, trips per status and rider savings."""
        report = SystemImpactReport(total_users=len(self._users), total_trips=len(self._trips))

        for user in self._users:
            if user.is_driver:
                report.drivers += 1
            elif user.is_rider:
                report.riders += 1
                report.total_money_saved += user.profile.total_money_saved

        for trip in self._trips:
            if trip.status == TripStatus.PENDING:
                report.pending_trips += 1
            elif trip.status == TripStatus.ACTIVE:
                report.active_trips += 1
            elif trip.status == TripStatus.COMPLETED:
                report.completed_trips += 1

        return report
