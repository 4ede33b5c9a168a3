"""RideLink carpool matching."""

__version__ = "0.1.0"
