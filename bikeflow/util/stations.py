import json


def load_stations(path, id_field="short_name"):
    """
    Load bike share stations from a GBFS station_information.json
    Returns a list of dicts with only the fields we care about.

    id_field picks the identifier trips refer to: "short_name" for Bluebikes,
    "station_id" for Toronto.
    """
    with open(path) as f:
        raw = json.load(f)["data"]["stations"]

    stations = []
    seen = set()
    for s in raw:
        if s.get(id_field) is None:
            raise ValueError(f"station {s.get('name')!r} has no {id_field!r}")

        sid = str(s[id_field])
        if sid in seen:
            raise ValueError(f"duplicate station id {sid!r}")
        seen.add(sid)

        stations.append({
            "short_name": sid,
            "station_id": str(s.get("station_id", sid)),
            "name": s.get("name", sid),
            "lat": float(s["lat"]),
            "lon": float(s["lon"]),
            "capacity": int(s.get("capacity") or 0),
        })

    return stations
