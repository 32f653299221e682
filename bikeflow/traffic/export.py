# bikeflow/traffic/export.py
from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

TRAFFIC_COLUMNS = ["departures", "arrivals", "total_traffic"]


def station_traffic_frame(rows: List[dict], id_field: str = "short_name") -> pd.DataFrame:
    """
    rows: output of TrafficAggregator.compute_station_traffic
    Returns DataFrame (index=station id) with name + traffic columns, ints.
    """
    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=["name"] + TRAFFIC_COLUMNS).rename_axis(id_field)

    missing = [c for c in [id_field] + TRAFFIC_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"station rows missing columns: {missing}")

    keep = [c for c in ["name"] if c in df.columns] + TRAFFIC_COLUMNS
    out = df.set_index(id_field)[keep].copy()
    out[TRAFFIC_COLUMNS] = out[TRAFFIC_COLUMNS].astype(int)
    return out


def write_station_traffic_csv(
    rows: List[dict],
    out_csv_path: str | Path,
    *,
    id_field: str = "short_name",
) -> Path:
    out_csv_path = Path(out_csv_path)
    out_csv_path.parent.mkdir(parents=True, exist_ok=True)

    df = station_traffic_frame(rows, id_field=id_field)
    df.sort_values("total_traffic", ascending=False).to_csv(out_csv_path, index=True)
    return out_csv_path
