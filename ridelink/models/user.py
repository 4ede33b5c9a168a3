"""User entity for the RideLink application."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ridelink.models.outcome import Outcome

MIN_RATING = 0.0
MAX_RATING = 5.0
DEFAULT_RATING = 5.0


class UserRole(Enum):
    """Roles a user can register with."""
    DRIVER = "Driver"
    RIDER = "Rider"


@dataclass
class DriverInfo:
    """
    Driver-specific details.

    Attributes:
        car_model: Model of the driver's car
        car_plate_number: Registration plate of the car
        car_capacity: Seats in the car, including the driver's own seat
        years_experience: Years the driver has been driving
    """
    car_model: str
    car_plate_number: str
    car_capacity: int
    years_experience: int


@dataclass
class RiderInfo:
    """
    Rider-specific details and running carpool totals.

    Attributes:
        preferred_payment_method: How the rider prefers to pay
        total_money_saved: Savings accrued by sharing rides
        total_distance_commuted: Kilometres travelled on completed trips
    """
    preferred_payment_method: str
    total_money_saved: float = 0.0
    total_distance_commuted: float = 0.0

    def update_savings(self, amount: float) -> bool:
        """Add to the rider's savings. Non-positive amounts are ignored."""
        if amount > 0:
            self.total_money_saved += amount
            return True
        return False

    def add_to_distance_commuted(self, distance: float) -> bool:
        """Add to the rider's commuted distance. Non-positive distances are ignored."""
        if distance > 0:
            self.total_distance_commuted += distance
            return True
        return False

    @property
    def average_saving_per_km(self) -> float:
        """Money saved per kilometre commuted."""
        if self.total_distance_commuted <= 0:
            return 0.0
        return self.total_money_saved / self.total_distance_commuted


@dataclass
class User:
    """
    Represents a user in the carpool registry.

    Drivers and riders share identity and rating; the role-specific payload
    lives in ``profile``.

    Attributes:
        id: Unique identifier for the user
        name: User's display name
        contact_info: Phone number or email
        age: User's age in years
        gender: Free-text gender
        role: Whether the user is a driver or a rider
        profile: DriverInfo for drivers, RiderInfo for riders
        rating: Running mean of all accepted ratings (0-5)
        rating_count: Number of ratings accepted so far
    """
    id: str
    name: str
    contact_info: str
    age: int
    gender: str
    role: UserRole
    profile: Union[DriverInfo, RiderInfo]
    rating: float = DEFAULT_RATING
    rating_count: int = 0

    @classmethod
    def new_driver(cls, user_id: str, name: str, contact_info: str, age: int, gender: str,
                   car_model: str, car_plate_number: str, car_capacity: int,
                   years_experience: int) -> "User":
        """Create a driver."""
        profile = DriverInfo(car_model, car_plate_number, car_capacity, years_experience)
        return cls(user_id, name, contact_info, age, gender, UserRole.DRIVER, profile)

    @classmethod
    def new_rider(cls, user_id: str, name: str, contact_info: str, age: int, gender: str,
                  preferred_payment_method: str) -> "User":
        """Create a rider with zero savings and distance."""
        profile = RiderInfo(preferred_payment_method)
        return cls(user_id, name, contact_info, age, gender, UserRole.RIDER, profile)

    @property
    def is_driver(self) -> bool:
        """Check if user is a driver."""
        return self.role == UserRole.DRIVER

    @property
    def is_rider(self) -> bool:
        """Check if user is a rider."""
        return self.role == UserRole.RIDER

    @property
    def driver_info(self) -> Optional[DriverInfo]:
        """Get the driver payload, or None for riders."""
        return self.profile if self.is_driver else None

    @property
    def rider_info(self) -> Optional[RiderInfo]:
        """Get the rider payload, or None for drivers."""
        return self.profile if self.is_rider else None

    def update_rating(self, new_rating: float) -> Outcome:
        """
        Fold a new rating into the running mean.

        Args:
            new_rating: Score between 0.0 and 5.0 inclusive

        Returns:
            Outcome: OK, or INVALID_RATING when the score is out of range
        """
        if not MIN_RATING <= new_rating <= MAX_RATING:
            return Outcome.INVALID_RATING

        self.rating = (self.rating * self.rating_count + new_rating) / (self.rating_count + 1)
        self.rating_count += 1
        return Outcome.OK

    def update_savings(self, amount: float) -> bool:
        """Credit savings to a rider. Always False for drivers."""
        if not self.is_rider:
            return False
        return self.profile.update_savings(amount)

    def add_to_distance_commuted(self, distance: float) -> bool:
        """Credit commuted distance to a rider. Always False for drivers."""
        if not self.is_rider:
            return False
        return self.profile.add_to_distance_commuted(distance)

    def __str__(self) -> str:
        return f"{self.id} ({self.role.value}) - {self.name}, Age: {self.age}"
