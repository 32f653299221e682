from __future__ import annotations

import json
import textwrap
from datetime import datetime

import pytest

from bikeflow.trips.load_trips import columns_for_format, iter_trips, load_trip_store
from bikeflow.trips.minute_buckets import MinuteBucketStore
from bikeflow.trips.types import TORONTO_COLUMNS, Trip
from bikeflow.util.stations import load_stations
from bikeflow.util.time_fmt import format_hhmm, format_time


def _write(tmp_path, name: str, text: str):
    path = tmp_path / name
    path.write_text(textwrap.dedent(text).strip() + "\n", encoding="utf-8")
    return path


def test_trip_from_bluebikes_record():
    trip = Trip.from_record(
        {
            "ride_id": "X1",
            "start_station_id": " A32000 ",
            "end_station_id": "M32006",
            "started_at": "2024-03-01 08:15:59.123",
            "ended_at": "2024-03-01 08:40:02",
        }
    )
    assert trip.start_station_id == "A32000"
    assert trip.end_station_id == "M32006"
    assert trip.started_at == datetime(2024, 3, 1, 8, 15, 59, 123000)
    assert trip.start_minute == 495
    assert trip.end_minute == 520


def test_trip_from_toronto_record():
    trip = Trip.from_record(
        {
            "Start Station Id": "7001",
            "End Station Id": "7002",
            "Start Time": "09/01/2024 23:59",
            "End Time": "09/02/2024 00:10",
        },
        TORONTO_COLUMNS,
    )
    assert trip.start_minute == 1439
    assert trip.end_minute == 10


@pytest.mark.parametrize(
    "row",
    [
        {"start_station_id": "A", "end_station_id": "B", "started_at": "not a date", "ended_at": "2024-03-01 08:00:00"},
        {"start_station_id": "A", "end_station_id": "B", "started_at": "2024-03-01 08:00:00", "ended_at": ""},
        {"start_station_id": "", "end_station_id": "B", "started_at": "2024-03-01 08:00:00", "ended_at": "2024-03-01 08:10:00"},
        {"start_station_id": "A", "started_at": "2024-03-01 08:00:00", "ended_at": "2024-03-01 08:10:00"},
    ],
)
def test_malformed_records_raise(row):
    with pytest.raises(ValueError):
        Trip.from_record(row)


def test_iter_trips_raise_reports_line_number():
    rows = [
        {"start_station_id": "A", "end_station_id": "B", "started_at": "2024-03-01 08:00:00", "ended_at": "2024-03-01 08:10:00"},
        {"start_station_id": "A", "end_station_id": "B", "started_at": "garbage", "ended_at": "2024-03-01 08:10:00"},
    ]
    with pytest.raises(ValueError, match="line 3"):
        list(iter_trips(rows))


def test_iter_trips_skip_collects_bad_rows():
    rows = [
        {"start_station_id": "A", "end_station_id": "B", "started_at": "garbage", "ended_at": "2024-03-01 08:10:00"},
        {"start_station_id": "A", "end_station_id": "B", "started_at": "2024-03-01 08:00:00", "ended_at": "2024-03-01 08:10:00"},
    ]
    skipped: list = []
    trips = list(iter_trips(rows, on_error="skip", skipped=skipped))
    assert len(trips) == 1
    assert [line for line, _msg in skipped] == [2]


def test_iter_trips_rejects_unknown_policy():
    with pytest.raises(ValueError):
        list(iter_trips([], on_error="coerce"))


def test_load_trip_store_from_csv(tmp_path):
    path = _write(
        tmp_path,
        "trips.csv",
        """
        ride_id,bike_type,started_at,ended_at,start_station_id,end_station_id,is_member
        r1,classic,2024-03-01 08:20:00,2024-03-01 08:40:00,A,B,1
        r2,electric,2024-03-01 23:59:30,2024-03-02 00:05:00,B,C,0
        r3,classic,2024-03-01 00:00:00,2024-03-01 00:30:00,C,A,1
        """,
    )
    store = load_trip_store(path, progress=False)

    assert store.is_loaded
    assert len(store) == 3
    assert len(store.departures_by_minute[500]) == 1
    assert len(store.departures_by_minute[1439]) == 1
    assert len(store.arrivals_by_minute[5]) == 1
    assert len(store.arrivals_by_minute[30]) == 1


def test_load_trip_store_raise_leaves_store_unsealed(tmp_path):
    path = _write(
        tmp_path,
        "trips.csv",
        """
        started_at,ended_at,start_station_id,end_station_id
        2024-03-01 08:20:00,2024-03-01 08:40:00,A,B
        31/02/2024,2024-03-01 08:40:00,A,B
        """,
    )

    store = MinuteBucketStore()
    with pytest.raises(ValueError):
        load_trip_store(path, store=store, progress=False)
    assert not store.is_loaded


def test_load_trip_store_skip(tmp_path):
    path = _write(
        tmp_path,
        "trips.csv",
        """
        started_at,ended_at,start_station_id,end_station_id
        2024-03-01 08:20:00,2024-03-01 08:40:00,A,B
        31/02/2024,2024-03-01 08:40:00,A,B
        2024-03-01 09:00:00,2024-03-01 09:10:00,,B
        """,
    )
    store = load_trip_store(path, on_error="skip", progress=False)
    assert store.is_loaded
    assert len(store) == 1


def test_columns_for_format():
    assert columns_for_format("Toronto") is TORONTO_COLUMNS
    with pytest.raises(ValueError):
        columns_for_format("citibike")


def test_load_stations(tmp_path):
    path = tmp_path / "stations.json"
    path.write_text(
        json.dumps(
            {
                "data": {
                    "stations": [
                        {"short_name": "A32000", "station_id": "x1", "name": "Central Sq", "lat": 42.365, "lon": -71.103, "capacity": 19},
                        {"short_name": "M32006", "station_id": "x2", "name": "MIT", "lat": "42.358", "lon": "-71.093"},
                    ]
                }
            }
        ),
        encoding="utf-8",
    )
    stations = load_stations(path)
    assert [s["short_name"] for s in stations] == ["A32000", "M32006"]
    assert stations[1]["lat"] == pytest.approx(42.358)
    assert stations[1]["capacity"] == 0

    by_station_id = load_stations(path, id_field="station_id")
    assert [s["short_name"] for s in by_station_id] == ["x1", "x2"]


def test_load_stations_rejects_duplicates(tmp_path):
    path = tmp_path / "stations.json"
    s = {"short_name": "A", "name": "a", "lat": 0, "lon": 0}
    path.write_text(json.dumps({"data": {"stations": [s, s]}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_stations(path)


@pytest.mark.parametrize(
    "minutes, label",
    [(-1, "(any time)"), (0, "12:00 AM"), (495, "8:15 AM"), (720, "12:00 PM"), (1439, "11:59 PM")],
)
def test_format_time(minutes, label):
    assert format_time(minutes) == label


def test_format_hhmm():
    assert format_hhmm(495) == "08:15"
