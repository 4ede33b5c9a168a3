"""Tests for the RideLink command line interface."""

import json
import os
import unittest
import tempfile
import shutil

from click.testing import CliRunner

from ridelink.cli_module.cli import cli
from ridelink.cli_module.utils import SESSION_FILE
from ridelink.models.trip import TripStatus
from ridelink.services.storage_service import load_registry


class TestRideLinkCli(unittest.TestCase):
    """End-to-end flows through the CLI against a temporary data directory."""

    def setUp(self):
        self.data_dir = tempfile.mkdtemp()
        self.runner = CliRunner()

    def tearDown(self):
        shutil.rmtree(self.data_dir, ignore_errors=True)

    def invoke(self, *args):
        return self.runner.invoke(cli, ["--data-dir", self.data_dir] + list(args))

    def register_driver(self, capacity=5):
        return self.invoke("user", "register-driver",
                           "--name", "Kwame Mensah", "--contact", "0244000001", "--age", "34",
                           "--gender", "Male", "--car-model", "Toyota Corolla",
                           "--car-plate", "GR-1234-20", "--capacity", str(capacity),
                           "--experience", "8")

    def register_rider(self, name="Ama Boateng"):
        return self.invoke("user", "register-rider",
                           "--name", name, "--contact", "0201234567", "--age", "27",
                           "--gender", "Female", "--payment-method", "Mobile Money")

    def post_trip(self, departure="2025-01-02 09:00"):
        return self.invoke("trip", "post",
                           "--origin-name", "Accra Mall", "--origin-area", "Tetteh Quarshie",
                           "--dest-name", "University of Ghana", "--dest-area", "Legon",
                           "--departure", departure)

    def search(self, time):
        return self.invoke("trip", "search",
                           "--origin-name", "Shell Station", "--origin-area", "tetteh quarshie",
                           "--dest-name", "Night Market", "--dest-area", "LEGON",
                           "--time", time)

    def test_register_driver_logs_in_and_saves(self):
        result = self.register_driver()

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("DRV001", result.output)
        with open(os.path.join(self.data_dir, SESSION_FILE)) as f:
            self.assertEqual(json.load(f)["user_id"], "DRV001")
        self.assertIsNotNone(load_registry(self.data_dir).get_user_by_id("DRV001"))

    def test_duplicate_id_is_reported(self):
        self.register_rider()
        result = self.invoke("user", "register-rider", "--name", "Kofi", "--contact", "1",
                             "--age", "30", "--gender", "Male", "--payment-method", "Cash",
                             "--id", "RDR001")
        self.assertIn("already exists", result.output)
        self.assertEqual(len(load_registry(self.data_dir).get_all_users()), 1)

    def test_login_and_logout(self):
        self.register_driver()
        self.register_rider()

        result = self.invoke("user", "login", "DRV001")
        self.assertIn("Welcome back, Kwame Mensah", result.output)
        self.assertIn("DRV001 (Driver)", self.invoke("user", "whoami").output)

        self.assertIn("logged out", self.invoke("user", "logout").output)
        self.assertIn("not logged in", self.invoke("user", "whoami").output)

    def test_login_unknown_user(self):
        result = self.invoke("user", "login", "NOPE")
        self.assertIn("User ID not found", result.output)

    def test_riders_cannot_post_trips(self):
        self.register_rider()
        result = self.post_trip()
        self.assertIn("Only a driver can do that", result.output)
        self.assertEqual(load_registry(self.data_dir).get_all_trips(), [])

    def test_full_carpool_flow(self):
        self.register_driver()
        result = self.post_trip()
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("TRIP001", result.output)
        self.assertIn("GHS 8.00", result.output)

        self.register_rider()
        self.register_rider("Efua Asante")

        self.assertIn("TRIP001", self.search("2025-01-02 09:20").output)
        self.assertIn("no matching trips", self.search("2025-01-02 09:31").output)

        self.invoke("user", "login", "RDR001")
        self.assertIn("Successfully joined", self.invoke("trip", "join", "TRIP001").output)
        self.assertIn("already in this trip", self.invoke("trip", "join", "TRIP001").output)
        self.invoke("user", "login", "RDR002")
        self.invoke("trip", "join", "TRIP001")

        self.invoke("user", "login", "DRV001")
        self.assertIn("Cannot complete trip", self.invoke("trip", "complete", "TRIP001").output)
        self.assertIn("has started", self.invoke("trip", "start", "TRIP001").output)
        self.assertIn("completed successfully", self.invoke("trip", "complete", "TRIP001").output)

        matcher = load_registry(self.data_dir)
        trip = matcher.get_trip_by_id("TRIP001")
        self.assertEqual(trip.status, TripStatus.COMPLETED)
        self.assertEqual(trip.passenger_ids, ["RDR001", "RDR002"])
        rider = matcher.get_user_by_id("RDR001")
        self.assertAlmostEqual(rider.rider_info.total_money_saved, 20.0)
        self.assertAlmostEqual(rider.rider_info.total_distance_commuted, 10.0)

        report = self.invoke("report", "impact").output
        self.assertIn("Completed", report)
        self.assertIn("GHS 40.00", report)

    def test_full_trip_cannot_be_joined(self):
        self.register_driver(capacity=2)
        self.post_trip()
        self.register_rider()
        self.invoke("trip", "join", "TRIP001")
        self.register_rider("Efua Asante")

        result = self.invoke("trip", "join", "TRIP001")
        self.assertIn("trip is full", result.output)
        self.assertIn("No trips found", self.invoke("trip", "list", "--available").output)

    def test_started_trip_cannot_be_joined(self):
        self.register_driver()
        self.post_trip()
        self.invoke("trip", "start", "TRIP001")
        self.register_rider()

        result = self.invoke("trip", "join", "TRIP001")
        self.assertIn("no longer accepting riders", result.output)

    def test_drivers_only_transition_their_own_trips(self):
        self.register_driver()
        self.post_trip()
        self.invoke("user", "register-driver", "--name", "Abena", "--contact", "2", "--age", "41",
                    "--gender", "Female", "--car-model", "Kia", "--car-plate", "GT-1",
                    "--capacity", "4", "--experience", "12")

        result = self.invoke("trip", "start", "TRIP001")
        self.assertIn("only start your own trips", result.output)

    def test_rate_user(self):
        self.register_driver()
        self.assertIn("rated 4.0/5.0", self.invoke("user", "rate", "DRV001", "4").output)
        self.assertIn("rated 3.5/5.0", self.invoke("user", "rate", "DRV001", "3").output)
        self.assertIn("between 0.0 and 5.0", self.invoke("user", "rate", "DRV001", "6").output)

        driver = load_registry(self.data_dir).get_user_by_id("DRV001")
        self.assertEqual(driver.rating_count, 2)

    def test_stats_and_listing(self):
        self.register_driver()
        self.post_trip()
        self.register_rider()

        stats = self.invoke("user", "stats").output
        self.assertIn("Mobile Money", stats)
        self.assertIn("GHS 0.00", stats)

        users = self.invoke("user", "list", "--role", "driver").output
        self.assertIn("Kwame Mensah", users)
        self.assertNotIn("Ama Boateng", users)

        trips = self.invoke("trip", "list").output
        self.assertIn("TRIP001", trips)
        self.assertIn("4/4", trips)

        shown = self.invoke("trip", "show", "TRIP001").output
        self.assertIn("Trip TRIP001 [Pending]", shown)
        self.assertIn("Seats: 4/4 available", shown)

    def test_invalid_departure_is_rejected_by_click(self):
        self.register_driver()
        result = self.post_trip(departure="tomorrow at nine")
        self.assertNotEqual(result.exit_code, 0)
        self.assertEqual(load_registry(self.data_dir).get_all_trips(), [])
