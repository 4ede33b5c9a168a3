"""Tests for the JSON HTTP front end."""

import pytest

from ridelink.api import create_app
from ridelink.services.matcher_service import MatcherService
from ridelink.services.storage_service import load_registry

DRIVER_PAYLOAD = {
    "role": "Driver",
    "name": "Kwame Mensah",
    "contact_info": "0244000001",
    "age": 34,
    "gender": "Male",
    "car_model": "Toyota Corolla",
    "car_plate_number": "GR-1234-20",
    "car_capacity": 3,
    "years_experience": 8,
}

TRIP_PAYLOAD = {
    "driver_id": "DRV001",
    "origin": {"name": "Accra Mall", "area": "Tetteh Quarshie"},
    "destination": {"name": "University of Ghana", "area": "Legon"},
    "departure_time": "2025-01-02 09:00",
}


def rider_payload(name):
    return {
        "role": "Rider",
        "name": name,
        "contact_info": "0201234567",
        "age": 27,
        "gender": "Female",
        "preferred_payment_method": "Cash",
    }


@pytest.fixture
def client():
    app = create_app(MatcherService())
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def seeded(client):
    client.post("/users", json=DRIVER_PAYLOAD)
    for name in ("Ama", "Efua", "Akosua"):
        client.post("/users", json=rider_payload(name))
    client.post("/trips", json=TRIP_PAYLOAD)
    return client


def test_register_users_generates_ids(client):
    response = client.post("/users", json=DRIVER_PAYLOAD)
    assert response.status_code == 201
    assert response.get_json()["id"] == "DRV001"

    response = client.post("/users", json=rider_payload("Ama"))
    assert response.get_json()["id"] == "RDR001"
    assert response.get_json()["total_money_saved"] == 0.0


def test_duplicate_user_id_conflicts(client):
    client.post("/users", json=dict(DRIVER_PAYLOAD, id="DRV001"))
    response = client.post("/users", json=dict(DRIVER_PAYLOAD, id="DRV001"))
    assert response.status_code == 409
    assert response.get_json()["outcome"] == "DUPLICATE_ID"


def test_invalid_user_payload(client):
    response = client.post("/users", json={"role": "Pilot", "name": "X"})
    assert response.status_code == 400


def test_post_trip_requires_driver(client):
    response = client.post("/trips", json=TRIP_PAYLOAD)
    assert response.status_code == 400


def test_post_and_get_trip(seeded):
    response = seeded.get("/trips/TRIP001")
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "Pending"
    assert body["seats_available"] == 2
    assert body["fare_per_person"] == pytest.approx(13.33)


def test_unknown_trip_is_404(client):
    assert client.get("/trips/NOPE").status_code == 404
    assert client.get("/users/NOPE").status_code == 404


def test_search(seeded):
    params = {"origin_name": "Shell", "origin_area": "tetteh quarshie",
              "dest_name": "Night Market", "dest_area": "Legon"}
    hit = seeded.get("/trips/search", query_string=dict(params, time="2025-01-02 09:20"))
    miss = seeded.get("/trips/search", query_string=dict(params, time="2025-01-02 09:31"))
    assert [trip["id"] for trip in hit.get_json()] == ["TRIP001"]
    assert miss.get_json() == []


def test_search_requires_parameters(seeded):
    assert seeded.get("/trips/search").status_code == 400


def test_join_until_full(seeded):
    assert seeded.post("/trips/TRIP001/join", json={"rider_id": "RDR001"}).status_code == 200
    duplicate = seeded.post("/trips/TRIP001/join", json={"rider_id": "RDR001"})
    assert duplicate.status_code == 409
    assert duplicate.get_json()["outcome"] == "DUPLICATE_RIDER"

    assert seeded.post("/trips/TRIP001/join", json={"rider_id": "RDR002"}).status_code == 200
    full = seeded.post("/trips/TRIP001/join", json={"rider_id": "RDR003"})
    assert full.get_json()["outcome"] == "TRIP_FULL"
    assert seeded.get("/trips/available").get_json() == []


def test_lifecycle_and_report(seeded):
    seeded.post("/trips/TRIP001/join", json={"rider_id": "RDR001"})
    seeded.post("/trips/TRIP001/join", json={"rider_id": "RDR002"})

    early = seeded.post("/trips/TRIP001/complete", json={"driver_id": "DRV001"})
    assert early.status_code == 409
    assert early.get_json()["outcome"] == "INVALID_TRANSITION"

    assert seeded.post("/trips/TRIP001/start", json={"driver_id": "DRV001"}).status_code == 200
    late_join = seeded.post("/trips/TRIP001/join", json={"rider_id": "RDR003"})
    assert late_join.get_json()["outcome"] == "TRIP_NOT_PENDING"

    done = seeded.post("/trips/TRIP001/complete", json={"driver_id": "DRV001"})
    assert done.get_json()["status"] == "Completed"

    rider = seeded.get("/users/RDR001").get_json()
    assert rider["total_money_saved"] == pytest.approx(20.0)
    assert rider["total_distance_commuted"] == pytest.approx(10.0)

    report = seeded.get("/report").get_json()
    assert report["completed_trips"] == 1
    assert report["riders"] == 3
    assert report["total_money_saved"] == pytest.approx(40.0)


def test_only_driver_can_start(seeded):
    response = seeded.post("/trips/TRIP001/start", json={"driver_id": "RDR001"})
    assert response.status_code == 409


def test_unknown_action(seeded):
    assert seeded.post("/trips/TRIP001/cancel").status_code == 404


def test_rating(seeded):
    assert seeded.post("/users/DRV001/rating", json={"rating": 4}).get_json()["rating"] == 4.0
    rejected = seeded.post("/users/DRV001/rating", json={"rating": 9})
    assert rejected.status_code == 400
    assert rejected.get_json()["outcome"] == "INVALID_RATING"


def test_changes_are_saved_to_data_dir(tmp_path):
    app = create_app(data_dir=str(tmp_path))
    client = app.test_client()
    client.post("/users", json=DRIVER_PAYLOAD)
    client.post("/trips", json=TRIP_PAYLOAD)

    reloaded = load_registry(str(tmp_path))
    assert reloaded.get_user_by_id("DRV001") is not None
    assert reloaded.get_trip_by_id("TRIP001") is not None


@pytest.mark.parametrize("field, value", [
    ("car_capacity", 0),
    ("car_capacity", -2),
    ("age", -4),
    ("years_experience", -1),
])
def test_out_of_range_driver_fields_rejected(client, field, value):
    response = client.post("/users", json=dict(DRIVER_PAYLOAD, **{field: value}))
    assert response.status_code == 400
    assert field in response.get_json()["error"]
    assert client.get("/users").get_json() == []


def test_negative_rider_age_rejected(client):
    response = client.post("/users", json=dict(rider_payload("Ama"), age=-1))
    assert response.status_code == 400


def test_single_seat_driver_can_post_trip(client):
    client.post("/users", json=dict(DRIVER_PAYLOAD, car_capacity=1))
    response = client.post("/trips", json=TRIP_PAYLOAD)
    assert response.status_code == 201
    assert response.get_json()["seats_available"] == 0
    assert client.get("/trips").status_code == 200


@pytest.mark.parametrize("path", [
    "/users",
    "/trips",
    "/trips/TRIP001/join",
    "/trips/TRIP001/start",
    "/users/DRV001/rating",
])
def test_non_object_body_is_bad_request(seeded, path):
    response = seeded.post(path, json=["x"])
    assert response.status_code == 400
    assert seeded.get("/trips/TRIP001").get_json()["passenger_ids"] == []


def test_driver_cannot_join_own_trip(seeded):
    response = seeded.post("/trips/TRIP001/join", json={"rider_id": "DRV001"})
    assert response.status_code == 409
    assert response.get_json()["outcome"] == "DRIVER_OWN_TRIP"
