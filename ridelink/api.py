"""JSON HTTP front end for the RideLink registry."""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ridelink.models.location import Location
from ridelink.models.outcome import Outcome
from ridelink.models.trip import Trip
from ridelink.models.user import User, UserRole
from ridelink.services.matcher_service import MatcherService
from ridelink.services.storage_service import DATETIME_FORMAT, load_registry, save_registry

logger = logging.getLogger(__name__)

# HTTP status for each failing outcome
OUTCOME_STATUS = {
    Outcome.NOT_FOUND: 404,
    Outcome.DUPLICATE_ID: 409,
    Outcome.DUPLICATE_RIDER: 409,
    Outcome.TRIP_FULL: 409,
    Outcome.TRIP_NOT_PENDING: 409,
    Outcome.DRIVER_OWN_TRIP: 409,
    Outcome.INVALID_TRANSITION: 409,
    Outcome.INVALID_RATING: 400,
}


def location_to_dict(location: Location) -> Dict[str, Any]:
    return {"name": location.name, "area": location.area, "safety_rating": location.safety_rating}


def user_to_dict(user: User) -> Dict[str, Any]:
    data = {
        "id": user.id,
        "role": user.role.value,
        "name": user.name,
        "contact_info": user.contact_info,
        "age": user.age,
        "gender": user.gender,
        "rating": user.rating,
        "rating_count": user.rating_count,
    }
    if user.is_driver:
        data.update({
            "car_model": user.profile.car_model,
            "car_plate_number": user.profile.car_plate_number,
            "car_capacity": user.profile.car_capacity,
            "years_experience": user.profile.years_experience,
        })
    else:
        data.update({
            "preferred_payment_method": user.profile.preferred_payment_method,
            "total_money_saved": user.profile.total_money_saved,
            "total_distance_commuted": user.profile.total_distance_commuted,
        })
    return data


def trip_to_dict(trip: Trip) -> Dict[str, Any]:
    return {
        "id": trip.id,
        "driver_id": trip.driver_id,
        "origin": location_to_dict(trip.origin),
        "destination": location_to_dict(trip.destination),
        "departure_time": trip.departure_time.strftime(DATETIME_FORMAT),
        "status": trip.status.value,
        "passenger_ids": list(trip.passenger_ids),
        "seats_available": trip.seats_available,
        "trip_distance_km": trip.trip_distance_km,
        "fare_per_person": round(trip.fare_per_person(), 2),
    }


def outcome_response(outcome: Outcome):
    """Build the error response for a failing outcome."""
    return jsonify({"error": outcome.message, "outcome": outcome.name}), OUTCOME_STATUS.get(outcome, 400)


def bad_request(message: str):
    return jsonify({"error": message}), 400


def _json_object() -> Dict[str, Any]:
    """Get the request body, which must be a JSON object."""
    data = request.get_json(force=True, silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    return data


def _parse_location(data: Dict[str, Any], key: str) -> Location:
    value = data.get(key) or {}
    return Location(str(value["name"]), str(value["area"]),
                    float(value.get("safety_rating", 3.0)))


def _parse_time(value: str) -> datetime:
    return datetime.strptime(value, DATETIME_FORMAT)


def _bounded_int(data: Dict[str, Any], key: str, minimum: int) -> int:
    value = int(data[key])
    if value < minimum:
        raise ValueError(f"{key} must be at least {minimum}")
    return value


def _user_from_payload(matcher: MatcherService, data: Dict[str, Any]) -> User:
    role = UserRole(data["role"])
    user_id = data.get("id") or matcher.next_user_id(role)
    age = _bounded_int(data, "age", 0)
    if role == UserRole.DRIVER:
        return User.new_driver(user_id, data["name"], data["contact_info"], age,
                               data["gender"], data["car_model"], data["car_plate_number"],
                               _bounded_int(data, "car_capacity", 1),
                               _bounded_int(data, "years_experience", 0))
    return User.new_rider(user_id, data["name"], data["contact_info"], age,
                          data["gender"], data["preferred_payment_method"])


def create_app(matcher: Optional[MatcherService] = None, data_dir: Optional[str] = None) -> Flask:
    """
    Build the Flask application around one registry.

    Every request runs under a single lock, so concurrent requests see the
    registry one at a time. When ``data_dir`` is given the registry is
    loaded from it and written back after each change.

    Args:
        matcher: Registry to serve; loaded from ``data_dir`` or empty if omitted
        data_dir: Directory holding users.csv and trips.csv
    """
    if matcher is None:
        matcher = load_registry(data_dir) if data_dir else MatcherService()

    logger.info(f"Serving {len(matcher.get_all_users())} user(s) and {len(matcher.get_all_trips())} trip(s)")

    app = Flask(__name__)
    CORS(app)
    lock = threading.Lock()

    def persist():
        if data_dir:
            save_registry(matcher, data_dir)

    @app.route('/users', methods=['GET', 'POST'])
    def users():
        """List users or register a new one."""
        with lock:
            if request.method == 'GET':
                return jsonify([user_to_dict(user) for user in matcher.get_all_users()])

            try:
                user = _user_from_payload(matcher, _json_object())
            except (KeyError, ValueError, TypeError) as e:
                return bad_request(f"Invalid user: {str(e)}")

            outcome = matcher.register_user(user)
            if not outcome:
                return outcome_response(outcome)
            persist()
            return jsonify(user_to_dict(user)), 201

    @app.route('/users/<user_id>', methods=['GET'])
    def get_user(user_id):
        with lock:
            user = matcher.get_user_by_id(user_id)
            if user is None:
                return outcome_response(Outcome.NOT_FOUND)
            return jsonify(user_to_dict(user))

    @app.route('/users/<user_id>/rating', methods=['POST'])
    def rate_user(user_id):
        """Submit a rating for a user."""
        with lock:
            user = matcher.get_user_by_id(user_id)
            if user is None:
                return outcome_response(Outcome.NOT_FOUND)
            try:
                score = float(_json_object()["rating"])
            except (KeyError, ValueError, TypeError) as e:
                return bad_request(f"Invalid rating: {str(e)}")

            outcome = user.update_rating(score)
            if not outcome:
                return outcome_response(outcome)
            persist()
            return jsonify(user_to_dict(user))

    @app.route('/trips', methods=['GET', 'POST'])
    def trips():
        """List trips or post a new one."""
        with lock:
            if request.method == 'GET':
                return jsonify([trip_to_dict(trip) for trip in matcher.get_all_trips()])

            try:
                data = _json_object()
            except ValueError as e:
                return bad_request(f"Invalid trip: {str(e)}")
            driver = matcher.get_user_by_id(data.get("driver_id", ""))
            if driver is None or not driver.is_driver:
                return bad_request("A registered driver_id is required")
            try:
                trip = Trip.for_driver(
                    data.get("id") or matcher.next_trip_id(),
                    driver,
                    _parse_location(data, "origin"),
                    _parse_location(data, "destination"),
                    _parse_time(data["departure_time"]),
                )
            except (KeyError, ValueError, TypeError) as e:
                return bad_request(f"Invalid trip: {str(e)}")

            matcher.post_trip(trip)
            persist()
            return jsonify(trip_to_dict(trip)), 201

    @app.route('/trips/available', methods=['GET'])
    def available_trips():
        with lock:
            return jsonify([trip_to_dict(trip) for trip in matcher.get_available_trips()])

    @app.route('/trips/search', methods=['GET'])
    def search_trips():
        """Find trips matching a rider's route and desired time."""
        params = request.args
        try:
            origin = Location(params["origin_name"], params["origin_area"])
            destination = Location(params["dest_name"], params["dest_area"])
            desired_time = _parse_time(params["time"])
        except (KeyError, ValueError) as e:
            return bad_request(f"Invalid search: {str(e)}")

        with lock:
            matches = matcher.find_matches(origin, destination, desired_time)
            return jsonify([trip_to_dict(trip) for trip in matches])

    @app.route('/trips/<trip_id>', methods=['GET'])
    def get_trip(trip_id):
        with lock:
            trip = matcher.get_trip_by_id(trip_id)
            if trip is None:
                return outcome_response(Outcome.NOT_FOUND)
            return jsonify(trip_to_dict(trip))

    @app.route('/trips/<trip_id>/join', methods=['POST'])
    def join_trip(trip_id):
        with lock:
            try:
                rider_id = _json_object().get("rider_id", "")
            except ValueError as e:
                return bad_request(f"Invalid join request: {str(e)}")
            outcome = matcher.admit_rider(trip_id, rider_id)
            if not outcome:
                return outcome_response(outcome)
            persist()
            return jsonify(trip_to_dict(matcher.get_trip_by_id(trip_id)))

    @app.route('/trips/<trip_id>/<action>', methods=['POST'])
    def transition_trip(trip_id, action):
        """Start or complete a trip on behalf of its driver."""
        if action not in ('start', 'complete'):
            return jsonify({"error": f"Unknown action '{action}'"}), 404

        with lock:
            try:
                driver_id = _json_object().get("driver_id")
            except ValueError as e:
                return bad_request(f"Invalid request: {str(e)}")
            if action == 'start':
                outcome = matcher.start_trip(trip_id, driver_id)
            else:
                outcome = matcher.complete_trip(trip_id, driver_id)
            if not outcome:
                return outcome_response(outcome)
            persist()
            return jsonify(trip_to_dict(matcher.get_trip_by_id(trip_id)))

    @app.route('/report', methods=['GET'])
    def impact_report():
        with lock:
            return jsonify(matcher.get_system_impact_report().to_dict())

    return app
