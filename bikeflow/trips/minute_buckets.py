# bikeflow/trips/minute_buckets.py
from __future__ import annotations

import operator
from itertools import chain
from typing import Iterable, List

from bikeflow.trips.types import MINUTES_PER_DAY, Trip

# Rolling window around a centre minute c: [c - WINDOW_BEFORE, c + WINDOW_AFTER]
# inclusive, 120 buckets wide.
WINDOW_BEFORE = 59
WINDOW_AFTER = 60

NO_FILTER = -1


def check_time_filter(center_minute) -> int:
    """
    Return center_minute as a plain int if it is -1 or a minute of day.

    Any integer type (numpy ints included) is accepted; bools, floats and
    strings raise ValueError.
    """
    if isinstance(center_minute, bool):
        raise ValueError(f"time filter must be an int, got {center_minute!r}")
    try:
        center_minute = operator.index(center_minute)
    except TypeError:
        raise ValueError(f"time filter must be an int, got {center_minute!r}") from None
    if center_minute != NO_FILTER and not (0 <= center_minute < MINUTES_PER_DAY):
        raise ValueError(
            f"time filter must be -1 or in [0, {MINUTES_PER_DAY - 1}], got {center_minute}"
        )
    return center_minute


def window_bounds(center_minute: int) -> tuple[int, int]:
    """
    (lower, upper_exclusive) bucket indices for the window around center_minute.

    lower > upper_exclusive means the window wraps past midnight.
    """
    center_minute = check_time_filter(center_minute)
    if center_minute == NO_FILTER:
        return 0, MINUTES_PER_DAY

    lower = (center_minute - WINDOW_BEFORE) % MINUTES_PER_DAY
    upper = (center_minute + WINDOW_AFTER + 1) % MINUTES_PER_DAY
    return lower, upper


def window_minutes(center_minute: int) -> List[int]:
    """Bucket minutes covered by the window, tail segment first when it wraps."""
    lower, upper = window_bounds(center_minute)
    if center_minute == NO_FILTER or lower < upper:
        return list(range(lower, upper))
    return list(range(lower, MINUTES_PER_DAY)) + list(range(0, upper))


def windowed_trips(buckets: List[List[Trip]], center_minute: int) -> List[Trip]:
    """
    Flatten the buckets inside the circular window around center_minute.

    center_minute=-1 returns every trip in every bucket. Only the window's
    buckets are visited otherwise.
    """
    if len(buckets) != MINUTES_PER_DAY:
        raise ValueError(f"expected {MINUTES_PER_DAY} buckets, got {len(buckets)}")

    lower, upper = window_bounds(center_minute)

    if lower < upper:
        segments = buckets[lower:upper]
    else:
        # straddles midnight: tail [lower, 1440) then head [0, upper)
        segments = buckets[lower:] + buckets[:upper]

    return list(chain.from_iterable(segments))


class MinuteBucketStore:
    """
    All trips of one bulk load, partitioned by minute of day.

    departures_by_minute[m] holds trips starting in minute m,
    arrivals_by_minute[m] holds trips ending in minute m.
    """

    def __init__(self):
        self.departures_by_minute: List[List[Trip]] = [[] for _ in range(MINUTES_PER_DAY)]
        self.arrivals_by_minute: List[List[Trip]] = [[] for _ in range(MINUTES_PER_DAY)]
        self._n_trips = 0
        self._loaded = False

    @classmethod
    def from_trips(cls, trips: Iterable[Trip]) -> "MinuteBucketStore":
        store = cls()
        store.ingest_many(trips)
        store.seal()
        return store

    def __len__(self) -> int:
        return self._n_trips

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def ingest(self, trip: Trip) -> None:
        if self._loaded:
            raise RuntimeError("store is sealed; bulk load already finished")

        self.departures_by_minute[trip.start_minute].append(trip)
        self.arrivals_by_minute[trip.end_minute].append(trip)
        self._n_trips += 1

    def ingest_many(self, trips: Iterable[Trip]) -> int:
        n = 0
        for trip in trips:
            self.ingest(trip)
            n += 1
        return n

    def seal(self) -> None:
        """Mark the bulk load complete. Queries are only allowed after this."""
        self._loaded = True

    def require_loaded(self) -> None:
        if not self._loaded:
            raise RuntimeError(
                "trip store is still loading; call seal() after the bulk load"
            )

    def departures_in_window(self, center_minute: int) -> List[Trip]:
        return windowed_trips(self.departures_by_minute, center_minute)

    def arrivals_in_window(self, center_minute: int) -> List[Trip]:
        return windowed_trips(self.arrivals_by_minute, center_minute)

    def departure_counts(self) -> List[int]:
        return [len(b) for b in self.departures_by_minute]

    def arrival_counts(self) -> List[int]:
        return [len(b) for b in self.arrivals_by_minute]
