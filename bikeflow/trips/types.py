# bikeflow/trips/types.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping

MINUTES_PER_DAY = 1440


def minutes_since_midnight(ts: datetime) -> int:
    """Minute of day in [0, 1439]. Seconds are dropped, not rounded."""
    return ts.hour * 60 + ts.minute


def parse_timestamp(raw: str, time_format: str | None = None) -> datetime:
    """
    Parse a raw trip timestamp.

    time_format=None accepts ISO strings like "2024-03-01 08:15:59.123".
    Raises ValueError on anything unparseable.
    """
    if raw is None:
        raise ValueError("timestamp is missing")
    s = str(raw).strip()
    if not s:
        raise ValueError("timestamp is empty")
    if time_format is None:
        return datetime.fromisoformat(s)
    return datetime.strptime(s, time_format)


@dataclass(frozen=True)
class TripColumns:
    start_station: str
    end_station: str
    started_at: str
    ended_at: str
    time_format: str | None = None


BLUEBIKES_COLUMNS = TripColumns(
    start_station="start_station_id",
    end_station="end_station_id",
    started_at="started_at",
    ended_at="ended_at",
)

TORONTO_COLUMNS = TripColumns(
    start_station="Start Station Id",
    end_station="End Station Id",
    started_at="Start Time",
    ended_at="End Time",
    time_format="%m/%d/%Y %H:%M",
)


@dataclass(frozen=True)
class Trip:
    start_station_id: str
    end_station_id: str
    started_at: datetime
    ended_at: datetime

    @property
    def start_minute(self) -> int:
        return minutes_since_midnight(self.started_at)

    @property
    def end_minute(self) -> int:
        return minutes_since_midnight(self.ended_at)

    @classmethod
    def from_record(
        cls,
        row: Mapping[str, str],
        columns: TripColumns = BLUEBIKES_COLUMNS,
    ) -> "Trip":
        """
        Build a Trip from one raw feed row (e.g. a csv.DictReader dict).

        Raises ValueError for missing columns, empty station ids, or
        timestamps that do not parse.
        """
        for col in (
            columns.start_station,
            columns.end_station,
            columns.started_at,
            columns.ended_at,
        ):
            if col not in row:
                raise ValueError(f"trip record missing column {col!r}")

        s0 = str(row[columns.start_station] or "").strip()
        s1 = str(row[columns.end_station] or "").strip()
        if not s0 or not s1:
            raise ValueError("trip record has an empty station id")

        return cls(
            start_station_id=s0,
            end_station_id=s1,
            started_at=parse_timestamp(row[columns.started_at], columns.time_format),
            ended_at=parse_timestamp(row[columns.ended_at], columns.time_format),
        )
