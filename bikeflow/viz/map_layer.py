import folium

from bikeflow.viz.scales import flow_color

BOSTON_BIKE_LANES_URL = (
    "https://bostonopendata-boston.opendata.arcgis.com/datasets/"
    "boston::existing-bike-network-2022.geojson"
)
CAMBRIDGE_BIKE_LANES_URL = (
    "https://raw.githubusercontent.com/cambridgegis/cambridgegis_data/main/"
    "Recreation/Bike_Facilities/RECREATION_BikeFacilities.geojson"
)


def traffic_tooltip(s):
    return (
        f"{s['total_traffic']} trips "
        f"({s['departures']} departures, {s['arrivals']} arrivals)"
    )


def station_tooltip(s):
    return f"<b>{s['name']}</b><br>{traffic_tooltip(s)}"


# ============================================================
# STATIONS: size = total traffic, colour = departure ratio
# ============================================================
def add_traffic_markers(m, stations, radius_scale, id_field="short_name"):
    """
    stations: rows from TrafficAggregator.compute_station_traffic
    Returns {station id: JS variable name of its marker}.
    """
    names = {}
    for s in stations:
        total = int(s["total_traffic"])

        marker = folium.CircleMarker(
            location=[float(s["lat"]), float(s["lon"])],
            radius=radius_scale(total),
            color="white",
            weight=1,
            fill=True,
            fill_color=flow_color(int(s["departures"]), total),
            fill_opacity=0.6,
            tooltip=station_tooltip(s),
        ).add_to(m)
        names[str(s[id_field])] = marker.get_name()

    return names


# ============================================================
# BIKE LANES: Boston + Cambridge (fetched by folium)
# ============================================================
def add_bike_lanes(m):
    for name, url, color in (
        ("Boston bike lanes", BOSTON_BIKE_LANES_URL, "green"),
        ("Cambridge bike lanes", CAMBRIDGE_BIKE_LANES_URL, "#32D400"),
    ):
        folium.GeoJson(
            url,
            name=name,
            style_function=lambda _f, c=color: {
                "color": c,
                "weight": 3,
                "opacity": 0.4,
            },
        ).add_to(m)
