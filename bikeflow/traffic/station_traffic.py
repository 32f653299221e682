# bikeflow/traffic/station_traffic.py
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping

from bikeflow.trips.minute_buckets import NO_FILTER, MinuteBucketStore, check_time_filter
from bikeflow.trips.types import Trip


def rollup_counts(trips: Iterable[Trip], key: Callable[[Trip], str]) -> Dict[str, int]:
    """Group trips by key(trip) and reduce each group to its size."""
    counts: Dict[str, int] = {}
    for t in trips:
        k = key(t)
        counts[k] = counts.get(k, 0) + 1
    return counts


def _start_station(t: Trip) -> str:
    return t.start_station_id


def _end_station(t: Trip) -> str:
    return t.end_station_id


class TrafficAggregator:
    """
    Per-station departures / arrivals / total_traffic for a time filter.

    Owns a sealed MinuteBucketStore. Every call recomputes from the store, so
    the result only depends on (store, stations, time_filter). A filtered call
    touches the 120 window buckets only.
    """

    def __init__(self, store: MinuteBucketStore, *, id_field: str = "short_name"):
        self.store = store
        self.id_field = id_field

    def station_counts(self, time_filter: int = NO_FILTER) -> tuple[Dict[str, int], Dict[str, int]]:
        time_filter = check_time_filter(time_filter)
        self.store.require_loaded()

        dep_trips = self.store.departures_in_window(time_filter)
        arr_trips = self.store.arrivals_in_window(time_filter)

        departures = rollup_counts(dep_trips, _start_station)
        arrivals = rollup_counts(arr_trips, _end_station)
        return departures, arrivals

    def compute_station_traffic(
        self,
        stations: List[Mapping],
        time_filter: int = NO_FILTER,
    ) -> List[dict]:
        """
        Returns new station dicts (same order) with departures, arrivals and
        total_traffic added. Stations without trips in the window get zeros.
        Input dicts are left untouched.
        """
        departures, arrivals = self.station_counts(time_filter)

        out: List[dict] = []
        for s in stations:
            sid = str(s[self.id_field])
            # no trips in the window means zero, not missing
            dep = departures.get(sid, 0)
            arr = arrivals.get(sid, 0)
            row = dict(s)
            row["departures"] = dep
            row["arrivals"] = arr
            row["total_traffic"] = dep + arr
            out.append(row)

        return out


def compute_station_traffic(
    store: MinuteBucketStore,
    stations: List[Mapping],
    time_filter: int = NO_FILTER,
    *,
    id_field: str = "short_name",
) -> List[dict]:
    return TrafficAggregator(store, id_field=id_field).compute_station_traffic(
        stations, time_filter
    )
