"""Location entity for the RideLink application."""

from dataclasses import dataclass

MIN_SAFETY_RATING = 0.0
MAX_SAFETY_RATING = 5.0
DEFAULT_SAFETY_RATING = 3.0


@dataclass(frozen=True)
class Location:
    """
    Represents a pickup or drop-off place.

    Attributes:
        name: Name of the place (e.g., "Accra Mall")
        area: Zone or area the place belongs to (e.g., "East Legon")
        safety_rating: Perceived safety of the place, clamped to 0-5
    """
    name: str
    area: str
    safety_rating: float = DEFAULT_SAFETY_RATING

    def __post_init__(self):
        """Clamp the safety rating into range."""
        clamped = min(MAX_SAFETY_RATING, max(MIN_SAFETY_RATING, float(self.safety_rating)))
        object.__setattr__(self, "safety_rating", clamped)

    def __str__(self) -> str:
        return f"{self.name} ({self.area})"


def _simple_upper(char: str) -> str:
    upper = char.upper()
    return upper if len(upper) == 1 else char


def _simple_lower(char: str) -> str:
    # U+0130 is the only character that lowercases to two; its single-character form is the first
    return char.lower()[0]


def equals_ignore_case(first: str, second: str) -> bool:
    """
    Compare two strings character by character, ignoring case.

    Each pair of characters is equal, or equal after uppercasing, or equal
    after uppercasing then lowercasing. Only one-to-one case mappings are
    used, so "Straße" and "STRASSE" differ while "İzmir" and "izmir" match.
    """
    if len(first) != len(second):
        return False
    for a, b in zip(first, second):
        if a == b:
            continue
        upper_a, upper_b = _simple_upper(a), _simple_upper(b)
        if upper_a == upper_b or _simple_lower(upper_a) == _simple_lower(upper_b):
            continue
        return False
    return True


def locations_match(first: Location, second: Location) -> bool:
    """
    Check whether two locations are equivalent for routing.

    Two places match when they share an area or carry the same name,
    compared case-insensitively.
    """
    return (equals_ignore_case(first.area, second.area)
            or equals_ignore_case(first.name, second.name))
