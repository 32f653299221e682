# bikeflow/main.py

from bikeflow.trips.load_trips import load_trip_store
from bikeflow.traffic.station_traffic import TrafficAggregator
from bikeflow.traffic.export import write_station_traffic_csv
from bikeflow.util.stations import load_stations
from bikeflow.util.time_fmt import format_time

from bikeflow.viz.traffic_map import serve_traffic_map


TRIPS = "bluebikes-traffic-2024-03.csv"
STATIONS = "bluebikes-stations.json"
MORNING_PEAK = 8 * 60 + 30


def main():
    # ---- load (must finish before any query) ----
    stations = load_stations(STATIONS)
    store = load_trip_store(TRIPS, on_error="skip")
    aggregator = TrafficAggregator(store)

    # ---- export all-day + morning peak ----
    all_day = aggregator.compute_station_traffic(stations, -1)
    write_station_traffic_csv(all_day, "station_traffic_all_day.csv")

    peak = aggregator.compute_station_traffic(stations, MORNING_PEAK)
    write_station_traffic_csv(peak, "station_traffic_peak.csv")

    # ---- print busiest stations around the peak ----
    print(f"\nBusiest stations around {format_time(MORNING_PEAK)}:\n")
    top = sorted(peak, key=lambda s: s["total_traffic"], reverse=True)[:10]
    for i, s in enumerate(top, 1):
        print(
            f"{i:02d}. {s['name']:<40} "
            f"{s['total_traffic']:5d} trips "
            f"({s['departures']} out / {s['arrivals']} in)"
        )

    # ---- UI ----
    serve_traffic_map(
        aggregator=aggregator,
        stations=stations,
        port=8080,
        title="Bluebikes Traffic",
        bike_lanes=False,
    )


if __name__ == "__main__":
    main()
