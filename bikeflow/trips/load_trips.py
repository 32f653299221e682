# bikeflow/trips/load_trips.py
from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Iterator, Mapping

from colorama import Fore, Style
from tqdm import tqdm

from bikeflow.trips.minute_buckets import MinuteBucketStore
from bikeflow.trips.types import BLUEBIKES_COLUMNS, TORONTO_COLUMNS, Trip, TripColumns

TRIP_FORMATS = {
    "bluebikes": BLUEBIKES_COLUMNS,
    "toronto": TORONTO_COLUMNS,
}

ON_ERROR_CHOICES = ("raise", "skip")


def columns_for_format(name: str) -> TripColumns:
    try:
        return TRIP_FORMATS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"unknown trip format {name!r} (expected one of {sorted(TRIP_FORMATS)})"
        ) from None


def iter_trips(
    rows: Iterable[Mapping[str, str]],
    *,
    columns: TripColumns = BLUEBIKES_COLUMNS,
    on_error: str = "raise",
    skipped: list | None = None,
) -> Iterator[Trip]:
    """
    Convert raw feed rows into Trips, one at a time.

    on_error="raise": the first malformed row aborts with ValueError naming its line.
    on_error="skip": malformed rows are left out; (line, message) pairs are
    appended to `skipped` when it is given.
    """
    if on_error not in ON_ERROR_CHOICES:
        raise ValueError(f"on_error must be one of {ON_ERROR_CHOICES}, got {on_error!r}")

    # line 1 is the CSV header
    for line_no, row in enumerate(rows, start=2):
        try:
            trip = Trip.from_record(row, columns)
        except ValueError as e:
            if on_error == "raise":
                raise ValueError(f"bad trip record on line {line_no}: {e}") from e
            if skipped is not None:
                skipped.append((line_no, str(e)))
            continue
        yield trip


def _count_rows(path: Path) -> int | None:
    try:
        with open(path, "r", encoding="utf-8-sig", errors="replace") as f:
            return max(0, sum(1 for _ in f) - 1)
    except OSError:
        return None


def load_trip_store(
    trips_csv_path: str | Path,
    *,
    columns: TripColumns = BLUEBIKES_COLUMNS,
    on_error: str = "raise",
    store: MinuteBucketStore | None = None,
    progress: bool = True,
) -> MinuteBucketStore:
    """
    Stream a trips CSV into a MinuteBucketStore and seal it.

    The returned store is fully loaded; nothing is sealed if the load fails.
    """
    trips_csv_path = Path(trips_csv_path)
    if store is None:
        store = MinuteBucketStore()

    print(f"{Fore.CYAN}Processing trips from {trips_csv_path}…{Style.RESET_ALL}")

    total_rows = _count_rows(trips_csv_path) if progress else None
    skipped: list = []

    with open(trips_csv_path, newline="", encoding="utf-8-sig", errors="replace") as f:
        reader = csv.DictReader(f)
        it = reader
        if progress:
            it = tqdm(reader, total=total_rows, desc="Reading trips")

        n = store.ingest_many(
            iter_trips(it, columns=columns, on_error=on_error, skipped=skipped)
        )

    store.seal()

    if skipped:
        first_line, first_msg = skipped[0]
        print(
            f"{Fore.YELLOW}Skipped {len(skipped)} malformed trip rows "
            f"(first: line {first_line}: {first_msg}){Style.RESET_ALL}"
        )
    print(f"{Fore.MAGENTA}Bucketed {n} trips{Style.RESET_ALL}")
    print(f"{Fore.GREEN}Trip store loaded.{Style.RESET_ALL}")

    return store
