"""
Weekly Schedule Codec

Converts the string-encoded session fields stored in a plan's weekly
schedule ("10km", "5:00") to numbers and back.

Parsing never raises: a missing or corrupt distance reads as 0.0 km
(rest day / non-distance session) and a missing or corrupt pace reads
as 360 s/km (6:00). Rounding is half-up everywhere so stored values
match what runners were shown before the rewrite.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DAYS_OF_WEEK = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

DEFAULT_PACE_SECONDS = 360  # 6:00 /km

_DISTANCE_RE = re.compile(r"(\d+(?:\.\d+)?)")
_PACE_RE = re.compile(r"(\d+):(\d+)")


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with .5 going up (not banker's rounding)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def parse_distance(distance: Optional[str]) -> float:
    """Return the first number in a distance string, in km."""
    if not distance:
        return 0.0
    match = _DISTANCE_RE.search(str(distance))
    return float(match.group(1)) if match else 0.0


def format_distance(distance_km: float) -> str:
    """Format km without a trailing '.0' (10.0 -> '10km', 11.5 -> '11.5km')."""
    if float(distance_km).is_integer():
        return f"{int(distance_km)}km"
    return f"{float(distance_km)!r}km"


def parse_pace(pace: Optional[str]) -> int:
    """Parse 'MM:SS' per km into total seconds."""
    if not pace:
        return DEFAULT_PACE_SECONDS
    match = _PACE_RE.search(str(pace))
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))
    return DEFAULT_PACE_SECONDS


def format_pace(pace_seconds: int) -> str:
    """Format seconds per km as 'M:SS'."""
    pace_seconds = int(pace_seconds)
    minutes = pace_seconds // 60
    seconds = pace_seconds % 60
    return f"{minutes}:{seconds:02d}"


@dataclass
class PlannedSession:
    """Typed view of one day entry in the weekly schedule."""
    session_type: Optional[str]
    distance_km: float
    pace_seconds: int
    # Stored form, carried through so untouched keys (duration, notes, ...) survive
    stored: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_stored(cls, data: Dict[str, Any]) -> "PlannedSession":
        return cls(
            session_type=data.get("type"),
            distance_km=parse_distance(data.get("distance")),
            pace_seconds=parse_pace(data.get("pace")),
            stored=dict(data),
        )

    @property
    def has_distance(self) -> bool:
        return self.distance_km > 0

    def rescaled(self, distance_km: float, pace_seconds: int) -> Dict[str, Any]:
        """Stored form with new distance and pace, every other key kept."""
        return {
            **self.stored,
            "distance": format_distance(distance_km),
            "pace": format_pace(pace_seconds),
        }


def week_key(schedule: Dict[Any, Any], week: int) -> Optional[Any]:
    """
    Find the key used for a week.

    JSON round-trips turn integer keys into strings, so both are accepted.
    """
    if str(week) in schedule:
        return str(week)
    if week in schedule:
        return week
    return None
