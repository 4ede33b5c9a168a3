"""Trip entity for the RideLink application."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Mapping

from ridelink.models.location import Location
from ridelink.models.outcome import Outcome
from ridelink.models.user import User

logger = logging.getLogger(__name__)

# Fare constants
FUEL_COST_PER_KM = 2.5
BASE_FARE = 15.0
DEFAULT_TRIP_DISTANCE_KM = 10.0


class TripStatus(Enum):
    """Possible statuses for a trip."""
    PENDING = "Pending"
    ACTIVE = "Active"
    COMPLETED = "Completed"


# Each status has at most one legal successor
TRIP_TRANSITIONS = {
    TripStatus.PENDING: TripStatus.ACTIVE,
    TripStatus.ACTIVE: TripStatus.COMPLETED,
}


@dataclass
class Trip:
    """
    Represents a ride offered by a driver.

    The trip refers to its driver and passengers by ID only; the registry
    owns the users themselves. The driver's car capacity is copied in when
    the trip is posted.

    Attributes:
        id: Unique identifier for the trip
        driver_id: ID of the driver offering the trip
        car_capacity: Seats in the driver's car, including the driver's seat
        origin: Where the trip starts
        destination: Where the trip ends
        departure_time: When the driver leaves
        passenger_ids: IDs of joined riders, in join order
        trip_distance_km: Length of the trip in kilometres
        status: Current status of the trip
    """
    id: str
    driver_id: str
    car_capacity: int
    origin: Location
    destination: Location
    departure_time: datetime
    passenger_ids: List[str] = field(default_factory=list)
    trip_distance_km: float = DEFAULT_TRIP_DISTANCE_KM
    status: TripStatus = TripStatus.PENDING

    @classmethod
    def for_driver(cls, trip_id: str, driver: User, origin: Location, destination: Location,
                   departure_time: datetime) -> "Trip":
        """Create a pending trip offered by ``driver``."""
        return cls(
            id=trip_id,
            driver_id=driver.id,
            car_capacity=driver.profile.car_capacity,
            origin=origin,
            destination=destination,
            departure_time=departure_time,
        )

    @property
    def seat_limit(self) -> int:
        """Passenger seats in the car; the driver takes one."""
        return self.car_capacity - 1

    @property
    def passenger_count(self) -> int:
        """Get the number of joined passengers."""
        return len(self.passenger_ids)

    @property
    def seats_available(self) -> int:
        """Get the number of free passenger seats."""
        return max(0, self.seat_limit - self.passenger_count)

    @property
    def has_free_seat(self) -> bool:
        """Check if at least one passenger seat is free."""
        return self.passenger_count < self.seat_limit

    @property
    def is_pending(self) -> bool:
        return self.status == TripStatus.PENDING

    def is_driven_by(self, user_id: str) -> bool:
        """Check if the given user is this trip's driver."""
        return self.driver_id == user_id

    def has_passenger(self, user_id: str) -> bool:
        return user_id in self.passenger_ids

    def admit_rider(self, rider: User) -> Outcome:
        """
        Add a rider to the trip.

        Args:
            rider: The user joining the trip

        Returns:
            Outcome: OK, TRIP_NOT_PENDING, DRIVER_OWN_TRIP, TRIP_FULL or DUPLICATE_RIDER
        """
        if not self.is_pending:
            return Outcome.TRIP_NOT_PENDING
        if self.is_driven_by(rider.id):
            return Outcome.DRIVER_OWN_TRIP
        if self.passenger_count >= self.seat_limit:
            return Outcome.TRIP_FULL
        if self.has_passenger(rider.id):
            return Outcome.DUPLICATE_RIDER

        self.passenger_ids.append(rider.id)
        logger.info(f"{rider.name} has been added to trip {self.id}")
        return Outcome.OK

    def _advance(self, expected: TripStatus) -> Outcome:
        if self.status != expected:
            logger.warning(f"Cannot move trip {self.id} on from status {self.status.value}")
            return Outcome.INVALID_TRANSITION
        self.status = TRIP_TRANSITIONS[expected]
        return Outcome.OK

    def start(self) -> Outcome:
        """Start the trip. Only pending trips can start."""
        outcome = self._advance(TripStatus.PENDING)
        if outcome:
            logger.info(f"Trip {self.id} has started")
        return outcome

    def complete(self, users: Mapping[str, User]) -> Outcome:
        """
        Complete an active trip and credit each rider.

        Every passenger that resolves to a rider gets the trip distance and
        the difference between a solo ride and their share of the fare.
        Passengers missing from ``users`` are skipped.

        Args:
            users: Lookup of registered users by ID

        Returns:
            Outcome: OK, or INVALID_TRANSITION when the trip is not active
        """
        if self.status != TripStatus.ACTIVE:
            logger.warning(f"Cannot complete trip {self.id} - must be active first")
            return Outcome.INVALID_TRANSITION

        fare = self.fare_per_person()
        savings = self.solo_cost() - fare
        for passenger_id in self.passenger_ids:
            passenger = users.get(passenger_id)
            if passenger is None or not passenger.is_rider:
                continue
            passenger.add_to_distance_commuted(self.trip_distance_km)
            passenger.update_savings(savings)

        self._advance(TripStatus.ACTIVE)
        logger.info(f"Trip {self.id} completed with {self.passenger_count} passenger(s)")
        return Outcome.OK

    def total_cost(self) -> float:
        """Get the cost of the whole trip."""
        return BASE_FARE + self.trip_distance_km * FUEL_COST_PER_KM

    def solo_cost(self) -> float:
        """Get what one rider would pay travelling alone."""
        return self.trip_distance_km * FUEL_COST_PER_KM + BASE_FARE

    def fare_per_person(self) -> float:
        """
        Split the trip cost between passengers.

        With nobody on board yet the estimate assumes a full car.
        """
        if self.passenger_count == 0:
            return self.total_cost() / self.car_capacity
        return self.total_cost() / self.passenger_count
