import os

from bikeflow.trips.load_trips import columns_for_format, load_trip_store
from bikeflow.traffic.station_traffic import TrafficAggregator
from bikeflow.util.stations import load_stations
from bikeflow.viz.traffic_map import create_app

TRIPS = os.environ.get("TRIPS_CSV", "bluebikes-traffic-2024-03.csv")
STATIONS = os.environ.get("STATIONS_JSON", "bluebikes-stations.json")
TRIP_FORMAT = os.environ.get("TRIP_FORMAT", "bluebikes")
ON_ERROR = os.environ.get("ON_ERROR", "skip")
BIKE_LANES = os.environ.get("BIKE_LANES", "0") == "1"
TITLE = os.environ.get("TITLE", "Bike Share Traffic")

# toronto trips reference station_id, bluebikes trips reference short_name
ID_FIELDS = {"bluebikes": "short_name", "toronto": "station_id"}


def build_app():
  columns = columns_for_format(TRIP_FORMAT)
  id_field = ID_FIELDS.get(TRIP_FORMAT.strip().lower(), "short_name")

  stations = load_stations(STATIONS, id_field=id_field)
  store = load_trip_store(TRIPS, columns=columns, on_error=ON_ERROR)

  return create_app(
      aggregator=TrafficAggregator(store),
      stations=stations,
      title=TITLE,
      bike_lanes=BIKE_LANES,
  )


def main():
  app = build_app()

  port = int(os.environ.get("PORT", "8080"))

  app.run(
      host="0.0.0.0",  # IMPORTANT for Render
      port=port,
  )


if __name__ == "__main__":
  main()
