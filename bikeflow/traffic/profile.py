# bikeflow/traffic/profile.py
from __future__ import annotations

import numpy as np

from bikeflow.trips.minute_buckets import WINDOW_AFTER, WINDOW_BEFORE, MinuteBucketStore
from bikeflow.trips.types import MINUTES_PER_DAY


def minute_activity(store: MinuteBucketStore) -> np.ndarray:
    """Departures + arrivals per minute of day, shape (1440,)."""
    dep = np.asarray(store.departure_counts(), dtype=np.int64)
    arr = np.asarray(store.arrival_counts(), dtype=np.int64)
    return dep + arr


def windowed_activity(per_minute: np.ndarray) -> np.ndarray:
    """
    Total activity inside the rolling window for every centre minute.

    out[c] == per_minute[window_minutes(c)].sum(), wrapping at midnight.
    """
    x = np.asarray(per_minute, dtype=np.int64)
    if x.shape != (MINUTES_PER_DAY,):
        raise ValueError(f"expected shape ({MINUTES_PER_DAY},), got {x.shape}")

    # pad circularly so every window is a contiguous run
    padded = np.concatenate([x[-WINDOW_BEFORE:], x, x[:WINDOW_AFTER]])
    csum = np.concatenate([[0], np.cumsum(padded)])
    width = WINDOW_BEFORE + WINDOW_AFTER + 1
    return csum[width:] - csum[:-width]


def hourly_activity(per_minute: np.ndarray) -> list[int]:
    """Per-minute activity summed into 24 hourly totals."""
    x = np.asarray(per_minute, dtype=np.int64)
    return [int(v) for v in x.reshape(24, 60).sum(axis=1)]
