"""Pick a city-like place name from geocoding candidates."""

from typing import Final, Optional, Sequence, Tuple

from pulse_weather.weather.models import GeocodeCandidate

# Case-sensitive markers of administrative areas rather than places
ADMINISTRATIVE_MARKERS: Final[Tuple[str, ...]] = ("County", "Parish", "ZIP", "Postal")


def is_city_like(candidate: GeocodeCandidate) -> bool:
    """Check whether a candidate's name looks like a city or town."""
    name = candidate.name
    if not name:
        return False
    if any(marker in name for marker in ADMINISTRATIVE_MARKERS):
        return False
    return name != candidate.state and name != candidate.country


def resolve_location_name(candidates: Sequence[GeocodeCandidate]) -> Optional[GeocodeCandidate]:
    """Select the first city-like candidate, falling back to the first one.

    Args:
        candidates: Geocoding matches in the upstream relevance order

    Returns:
        Selected candidate, or None if there are no candidates
    """
    for candidate in candidates:
        if is_city_like(candidate):
            return candidate
    return candidates[0] if candidates else None
