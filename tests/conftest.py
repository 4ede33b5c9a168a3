"""Shared test fixtures."""

from datetime import datetime

import pytest

from ridelink.models.location import Location
from ridelink.models.trip import Trip
from ridelink.models.user import User
from ridelink.services.matcher_service import MatcherService

DEPARTURE = datetime(2025, 1, 2, 9, 0)


@pytest.fixture
def driver():
    """Driver with a five-seat car (four passenger seats)."""
    return User.new_driver("DRV001", "Kwame Mensah", "0244000001", 34, "Male",
                           "Toyota Corolla", "GR-1234-20", 5, 8)


@pytest.fixture
def small_car_driver():
    """Driver with a four-seat car (three passenger seats)."""
    return User.new_driver("DRV002", "Abena Owusu", "0244000002", 41, "Female",
                           "Kia Picanto", "GT-5678-21", 4, 12)


@pytest.fixture
def riders():
    return [
        User.new_rider(f"RDR00{i}", f"Rider {i}", f"05500000{i}", 20 + i, "Female", "Mobile Money")
        for i in range(1, 6)
    ]


@pytest.fixture
def rider(riders):
    return riders[0]


@pytest.fixture
def origin():
    return Location("Accra Mall", "Tetteh Quarshie")


@pytest.fixture
def destination():
    return Location("University of Ghana", "Legon")


@pytest.fixture
def trip(driver, origin, destination):
    return Trip.for_driver("TRIP001", driver, origin, destination, DEPARTURE)


@pytest.fixture
def matcher(driver, small_car_driver, riders):
    return MatcherService(users=[driver, small_car_driver] + riders)
