"""Flight state codes and their canonical labels."""

from __future__ import annotations

from enum import IntEnum


class FlightState(IntEnum):
    PRELTOFF = 0  # on the pad
    PWFLIGHT = 1  # powered ascent
    CRUISING = 2  # coasting
    CRSCANRD = 3  # coasting, scan/read active
    FALLDROG = 4  # under drogue
    FALLMAIN = 5  # under main
    CONCLUDE = 6  # landed


UNKNOWN_STATE = "UNKNOWN"

_LABELS = {s.value: s.name for s in FlightState}


def state_label(code: int) -> str:
    """Return the label for a state code, UNKNOWN_STATE for any other code."""
    label = _LABELS.get(code)
    if label is None:
        return UNKNOWN_STATE
    return label
