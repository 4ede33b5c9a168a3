"""CSV import and export for the RideLink registry."""

import csv
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ridelink.models.location import Location
from ridelink.models.trip import Trip, TripStatus
from ridelink.models.user import User, UserRole, DriverInfo, RiderInfo
from ridelink.services.matcher_service import MatcherService

logger = logging.getLogger(__name__)

USERS_FILE = "users.csv"
TRIPS_FILE = "trips.csv"
DATETIME_FORMAT = "%Y-%m-%d %H:%M"
PASSENGER_SEPARATOR = ";"

USER_FIELDS = [
    "ID", "Type", "Name", "ContactInfo", "Age", "Gender", "Rating", "RatingCount",
    "CarModel", "CarPlate", "CarCapacity", "YearsExp",
    "PaymentMethod", "MoneySaved", "DistanceCommuted",
]

TRIP_FIELDS = [
    "TripID", "DriverID", "OriginName", "OriginArea", "DestName", "DestArea",
    "DepartureTime", "Status", "PassengerCount", "PassengerIDs",
]


class StorageServiceError(Exception):
    """Custom exception for storage service errors."""
    pass


def user_to_record(user: User) -> Dict[str, Any]:
    """Flatten a user into a CSV row. Fields of the other role stay empty."""
    record = {name: "" for name in USER_FIELDS}
    record.update({
        "ID": user.id,
        "Type": user.role.value,
        "Name": user.name,
        "ContactInfo": user.contact_info,
        "Age": user.age,
        "Gender": user.gender,
        "Rating": user.rating,
        "RatingCount": user.rating_count,
    })

    if user.is_driver:
        record.update({
            "CarModel": user.profile.car_model,
            "CarPlate": user.profile.car_plate_number,
            "CarCapacity": user.profile.car_capacity,
            "YearsExp": user.profile.years_experience,
        })
    else:
        record.update({
            "PaymentMethod": user.profile.preferred_payment_method,
            "MoneySaved": user.profile.total_money_saved,
            "DistanceCommuted": user.profile.total_distance_commuted,
        })
    return record


def user_from_record(record: Mapping[str, str]) -> User:
    """
    Rebuild a user from a CSV row.

    Raises:
        StorageServiceError: If the row is malformed
    """
    try:
        role = UserRole(record["Type"])
        if role == UserRole.DRIVER:
            profile = DriverInfo(
                car_model=record["CarModel"],
                car_plate_number=record["CarPlate"],
                car_capacity=int(record["CarCapacity"]),
                years_experience=int(record["YearsExp"]),
            )
        else:
            profile = RiderInfo(
                preferred_payment_method=record["PaymentMethod"],
                total_money_saved=float(record["MoneySaved"] or 0),
                total_distance_commuted=float(record["DistanceCommuted"] or 0),
            )

        return User(
            id=record["ID"],
            name=record["Name"],
            contact_info=record["ContactInfo"],
            age=int(record["Age"]),
            gender=record["Gender"],
            role=role,
            profile=profile,
            rating=float(record.get("Rating") or 5.0),
            rating_count=int(record.get("RatingCount") or 0),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise StorageServiceError(f"Invalid user record {dict(record)}: {str(e)}")


def trip_to_record(trip: Trip) -> Dict[str, Any]:
    """Flatten a trip into a CSV row."""
    return {
        "TripID": trip.id,
        "DriverID": trip.driver_id,
        "OriginName": trip.origin.name,
        "OriginArea": trip.origin.area,
        "DestName": trip.destination.name,
        "DestArea": trip.destination.area,
        "DepartureTime": trip.departure_time.strftime(DATETIME_FORMAT),
        "Status": trip.status.value,
        "PassengerCount": trip.passenger_count,
        "PassengerIDs": PASSENGER_SEPARATOR.join(trip.passenger_ids),
    }


def trip_from_record(record: Mapping[str, str], driver: User) -> Trip:
    """
    Rebuild a trip from a CSV row.

    Rows written before passenger IDs were stored load with no passengers.
    A passenger list that repeats an ID, names the driver or overfills the
    car is malformed.

    Raises:
        StorageServiceError: If the row is malformed
    """
    try:
        passengers = record.get("PassengerIDs") or ""
        trip = Trip(
            id=record["TripID"],
            driver_id=driver.id,
            car_capacity=driver.profile.car_capacity,
            origin=Location(record["OriginName"], record["OriginArea"]),
            destination=Location(record["DestName"], record["DestArea"]),
            departure_time=datetime.strptime(record["DepartureTime"], DATETIME_FORMAT),
            passenger_ids=[p for p in passengers.split(PASSENGER_SEPARATOR) if p],
            status=TripStatus(record.get("Status") or TripStatus.PENDING.value),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise StorageServiceError(f"Invalid trip record {dict(record)}: {str(e)}")

    if len(set(trip.passenger_ids)) != trip.passenger_count:
        raise StorageServiceError(f"Trip {trip.id} lists a passenger more than once")
    if trip.has_passenger(trip.driver_id):
        raise StorageServiceError(f"Trip {trip.id} lists its own driver as a passenger")
    if trip.passenger_count > trip.seat_limit:
        raise StorageServiceError(
            f"Trip {trip.id} has {trip.passenger_count} passenger(s) but only {trip.seat_limit} seat(s)")
    return trip


def _read_rows(path: str) -> Optional[List[Dict[str, str]]]:
    if not os.path.exists(path):
        return None
    with open(path, "r", newline="") as f:
        return [row for row in csv.DictReader(f) if any(isinstance(v, str) and v.strip() for v in row.values())]


def _write_rows(path: str, fields: List[str], rows: List[Dict[str, Any]]) -> None:
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fields)
        writer.writeheader()
        writer.writerows(rows)


def save_users(path: str, users: List[User]) -> None:
    """Write all users to a CSV file."""
    try:
        _write_rows(path, USER_FIELDS, [user_to_record(user) for user in users])
    except OSError as e:
        raise StorageServiceError(f"Error saving users: {str(e)}")
    logger.info(f"Saved {len(users)} user(s) to {path}")


def load_users(path: str) -> List[User]:
    """Read users from a CSV file. A missing file yields no users."""
    try:
        rows = _read_rows(path)
    except OSError as e:
        raise StorageServiceError(f"Error loading users: {str(e)}")

    if rows is None:
        logger.info(f"No previous user data found at {path}")
        return []

    users = [user_from_record(row) for row in rows]
    logger.info(f"Loaded {len(users)} user(s) from {path}")
    return users


def save_trips(path: str, trips: List[Trip]) -> None:
    """Write all trips to a CSV file."""
    try:
        _write_rows(path, TRIP_FIELDS, [trip_to_record(trip) for trip in trips])
    except OSError as e:
        raise StorageServiceError(f"Error saving trips: {str(e)}")
    logger.info(f"Saved {len(trips)} trip(s) to {path}")


def load_trips(path: str, users: Mapping[str, User]) -> List[Trip]:
    """
    Read trips from a CSV file.

    Trips whose driver is not among ``users`` are skipped.

    Args:
        path: CSV file to read
        users: Registered users keyed by ID

    Returns:
        List[Trip]: Trips in file order
    """
    try:
        rows = _read_rows(path)
    except OSError as e:
        raise StorageServiceError(f"Error loading trips: {str(e)}")

    if rows is None:
        logger.info(f"No previous trip data found at {path}")
        return []

    trips = []
    for row in rows:
        driver = users.get(row.get("DriverID", ""))
        if driver is None or not driver.is_driver:
            logger.warning(f"Skipping trip {row.get('TripID')}: unknown driver {row.get('DriverID')}")
            continue
        trips.append(trip_from_record(row, driver))

    logger.info(f"Loaded {len(trips)} trip(s) from {path}")
    return trips


def load_registry(data_dir: str) -> MatcherService:
    """Build a registry from the users and trips files in ``data_dir``."""
    matcher = MatcherService(users=load_users(os.path.join(data_dir, USERS_FILE)))
    for trip in load_trips(os.path.join(data_dir, TRIPS_FILE), matcher.get_user_index()):
        matcher.post_trip(trip)
    return matcher


def save_registry(matcher: MatcherService, data_dir: str) -> None:
    """Write the registry's users and trips into ``data_dir``."""
    save_users(os.path.join(data_dir, USERS_FILE), matcher.get_all_users())
    save_trips(os.path.join(data_dir, TRIPS_FILE), matcher.get_all_trips())
