"""ID generation for RideLink users and trips."""

from typing import Iterable

DRIVER_PREFIX = "DRV"
RIDER_PREFIX = "RDR"
TRIP_PREFIX = "TRIP"
ID_WIDTH = 3


def generate_id(prefix: str, existing_ids: Iterable[str], width: int = ID_WIDTH) -> str:
    """
    Generate the next sequential ID for a prefix.

    IDs look like ``DRV001``. The sequence continues from the highest number
    already in use for the prefix, so gaps are never refilled.

    Args:
        prefix: Role or entity prefix
        existing_ids: IDs already in use
        width: Minimum number of digits

    Returns:
        str: A new ID not present in ``existing_ids``
    """
    highest = 0
    for existing in existing_ids:
        if not existing.startswith(prefix):
            continue
        suffix = existing[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:0{width}d}"
