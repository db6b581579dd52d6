# ABOUTME: Converts coordinate text from site pages into signed decimal degrees
# ABOUTME: Handles "Lat: x, Long: y" text and degree-minute-second compass notation

import math
import re

from heritage_scraper.models import Coordinates
from heritage_scraper.utils.logging import get_logger

logger = get_logger(__name__)

UNKNOWN = Coordinates(math.nan, math.nan)

_NUMBER = r"[-+]?\d+(?:\.\d+)?"
_LAT_LONG_PATTERN = re.compile(
    rf"lat(?:itude)?\s*:\s*({_NUMBER})\s*,\s*long(?:itude)?\s*:\s*({_NUMBER})", re.IGNORECASE
)
_DEGREE_TOKEN = re.compile(r"^([NSEW])(\d+(?:\.\d+)?)$", re.IGNORECASE)


def _to_decimal(degrees: float, minutes: float, seconds: float) -> float:
    return degrees + minutes / 60 + seconds / 3600


def _parse_axis(tokens: list[str], hemispheres: str) -> float:
    """Parse ``[<H><deg>, <min>, <sec>]`` where H must be one of ``hemispheres`` (positive first)."""
    match = _DEGREE_TOKEN.match(tokens[0])
    if not match or match.group(1).upper() not in hemispheres:
        raise ValueError(f"Bad degree token: {tokens[0]!r}")

    value = _to_decimal(float(match.group(2)), float(tokens[1]), float(tokens[2]))
    return -value if match.group(1).upper() == hemispheres[1] else value


def dms_to_decimal(text: str | None) -> tuple[float, float]:
    """Convert ``N34 23 47.1 E64 30 57.2`` style text to ``(latitude, longitude)``.

    Latitude is negated for ``S`` and longitude for ``W``. Empty or malformed input
    returns ``(nan, nan)``; this function never raises.
    """
    if not text or not text.strip():
        logger.warning("Failed to parse DMS string", text=text)
        return UNKNOWN

    tokens = text.split()
    if len(tokens) != 6:
        logger.warning("Failed to parse DMS string", text=text, token_count=len(tokens))
        return UNKNOWN

    try:
        latitude = _parse_axis(tokens[:3], "NS")
        longitude = _parse_axis(tokens[3:], "EW")
    except ValueError as e:
        logger.warning("Failed to parse DMS string", text=text, error=str(e))
        return UNKNOWN

    return Coordinates(latitude, longitude)


def parse_coordinates(text: str | None) -> Coordinates:
    """Parse either ``Lat: <num>, Long: <num>`` or DMS notation into decimal degrees."""
    if text:
        match = _LAT_LONG_PATTERN.search(text)
        if match:
            return Coordinates(float(match.group(1)), float(match.group(2)))

    return Coordinates(*dms_to_decimal(text))
