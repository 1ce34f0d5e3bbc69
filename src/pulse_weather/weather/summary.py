"""Daily forecast summaries from fine-grained observations."""

import logging
from datetime import date, datetime, timezone
from operator import itemgetter
from typing import Dict, Iterable, List, Optional

from pulse_weather.config import FORECAST_DAYS
from pulse_weather.weather.models import DaySummary, Observation

logger = logging.getLogger(__name__)


def observation_date(timestamp: int) -> str:
    """Return the UTC calendar day of an epoch timestamp as YYYY-MM-DD."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime('%Y-%m-%d')


def _most_common(counts: Dict[str, int]) -> Optional[str]:
    # max() keeps the first maximal item, so ties go to the first-seen value
    if not counts:
        return None
    return max(counts.items(), key=itemgetter(1))[0]


class _DayAccumulator:
    """Running statistics for one day."""

    def __init__(self, date_key: str, timestamp: int):
        self.date = date_key
        self.timestamp = timestamp
        self.temperatures: List[float] = []
        self.codes: Dict[str, int] = {}
        self.texts: Dict[str, int] = {}

    def add(self, observation: Observation) -> None:
        self.temperatures.append(observation.temperature)
        if observation.condition_code:
            self.codes[observation.condition_code] = self.codes.get(observation.condition_code, 0) + 1
        if observation.condition_text:
            self.texts[observation.condition_text] = self.texts.get(observation.condition_text, 0) + 1

    def summary(self) -> DaySummary:
        return DaySummary(
            date=self.date,
            timestamp=self.timestamp,
            high=max(self.temperatures),
            low=min(self.temperatures),
            condition_code=_most_common(self.codes),
            condition_text=_most_common(self.texts),
        )


def summarize_forecast(
    observations: Iterable[Observation],
    today: date,
    max_days: int = FORECAST_DAYS
) -> List[DaySummary]:
    """Reduce observations to per-day high/low and dominant condition.

    Days are returned in the order they first appear in ``observations``, so
    chronologically ordered input gives date-ascending output. The day equal
    to ``today`` is left out because callers show current conditions for it.

    Args:
        observations: Observations, expected in chronological order
        today: Reference UTC date to exclude
        max_days: Maximum number of days to return

    Returns:
        At most ``max_days`` daily summaries
    """
    today_key = today.strftime('%Y-%m-%d')
    days: Dict[str, _DayAccumulator] = {}

    for observation in observations:
        date_key = observation_date(observation.timestamp)
        if date_key == today_key:
            continue

        day = days.get(date_key)
        if day is None:
            day = days[date_key] = _DayAccumulator(date_key, observation.timestamp)
        day.add(observation)

    summaries = [day.summary() for day in list(days.values())[:max_days]]
    logger.debug(f"Summarized {len(days)} forecast days, returning {len(summaries)}")
    return summaries
