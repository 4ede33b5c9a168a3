"""Operation outcomes reported by the RideLink domain."""

from enum import Enum


class Outcome(Enum):
    """Result of a registry or trip operation.

    Only ``OK`` is truthy, so callers can test an outcome directly.
    """
    OK = "Operation completed successfully."
    DUPLICATE_ID = "A user with this ID already exists."
    TRIP_FULL = "Sorry, this trip is full."
    DUPLICATE_RIDER = "This rider is already in this trip."
    TRIP_NOT_PENDING = "This trip is no longer accepting riders."
    DRIVER_OWN_TRIP = "Drivers cannot join their own trip."
    INVALID_TRANSITION = "The trip cannot move to that status."
    INVALID_RATING = "Ratings must be between 0.0 and 5.0."
    NOT_FOUND = "No matching user or trip was found."

    def __bool__(self) -> bool:
        return self is Outcome.OK

    @property
    def message(self) -> str:
        """Get the human-readable message for this outcome."""
        return self.value
