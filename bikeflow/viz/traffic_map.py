# bikeflow/viz/traffic_map.py
from __future__ import annotations

import json

import folium
from colorama import Fore, Style
from flask import Flask, abort, jsonify, request

from bikeflow.traffic.profile import hourly_activity, minute_activity, windowed_activity
from bikeflow.traffic.station_traffic import TrafficAggregator
from bikeflow.trips.minute_buckets import NO_FILTER, check_time_filter
from bikeflow.util.time_fmt import format_time
from bikeflow.viz.map_layer import add_bike_lanes, add_traffic_markers, station_tooltip
from bikeflow.viz.scales import (
    ARRIVALS_COLOR,
    DEPARTURES_COLOR,
    SqrtRadiusScale,
    flow_color,
    mix_colors,
    radius_range_for,
)
from bikeflow.viz.time_slider import build_time_slider, window_label

CENTER_LAT = 42.36027
CENTER_LON = -71.09415


def _build_map_document(
    stations,
    t_cur,
    radius_scale,
    *,
    title=None,
    hourly_counts=None,
    window_counts=None,
    bike_lanes=False,
    id_field="short_name",
    center=(CENTER_LAT, CENTER_LON),
):
    m = folium.Map(
        location=list(center),
        zoom_start=12,
        min_zoom=5,
        max_zoom=18,
        tiles="cartodbpositron",
        prefer_canvas=True,
    )

    if bike_lanes:
        add_bike_lanes(m)

    # ---- stations ----
    marker_names = add_traffic_markers(
        m, stations, radius_scale.with_range(radius_range_for(t_cur)), id_field=id_field
    )

    # ---- time slider + live marker updates while dragging ----
    m.get_root().html.add_child(build_time_slider(t_cur, hourly_counts, window_counts))
    m.get_root().html.add_child(_live_update_script(marker_names))

    # ---- title + legend ----
    balanced = mix_colors(DEPARTURES_COLOR, ARRIVALS_COLOR, 0.5)
    title_html = (
        f"<div id='map-title'>{title} · {format_time(t_cur)}</div>" if title else ""
    )
    m.get_root().html.add_child(
        folium.Element(
            f"""
<style>
#map-title {{
  position: absolute;
  top: 12px;
  left: 50%;
  transform: translateX(-50%);
  background: rgba(255,255,255,0.95);
  padding: 6px 16px;
  border-radius: 999px;
  font-size: 14px;
  font-weight: 600;
  z-index: 1300;
  box-shadow: 0 1px 4px rgba(0,0,0,0.2);
}}

#map-legend {{
  position: absolute;
  bottom: 24px;
  left: 16px;
  background: rgba(255,255,255,0.95);
  padding: 8px 12px;
  border-radius: 10px;
  font-size: 12px;
  z-index: 1200;
}}

.legend-dot {{
  width: 10px;
  height: 10px;
  border-radius: 50%;
  display: inline-block;
  margin-right: 6px;
}}
</style>

{title_html}
<div id="map-legend">
  <div><span class="legend-dot" style="background:{DEPARTURES_COLOR}"></span> more departures</div>
  <div><span class="legend-dot" style="background:{balanced}"></span> balanced</div>
  <div><span class="legend-dot" style="background:{ARRIVALS_COLOR}"></span> more arrivals</div>
</div>
"""
        )
    )

    return m.get_root().render()


def _live_update_script(marker_names):
    """
    Re-aggregates on every slider input event: fetches /traffic for the
    dragged minute and restyles the existing circles in place. Only the
    latest response is applied.
    """
    return folium.Element(
        f"""
<script>
document.addEventListener("DOMContentLoaded", () => {{
  const slider = document.getElementById("time-slider");
  if (!slider) return;

  const MARKERS = {json.dumps(marker_names)};
  let latest = 0;

  slider.addEventListener("input", () => {{
    const seq = ++latest;
    const url = new URL("traffic", window.location.href);
    url.searchParams.set("t", String(slider.value));

    fetch(url).then((r) => r.json()).then((data) => {{
      if (seq !== latest) return;
      data.stations.forEach((s) => {{
        const marker = window[MARKERS[s.short_name]];
        if (!marker) return;
        marker.setRadius(s.radius);
        marker.setStyle({{ fillColor: s.fill_color }});
        marker.setTooltipContent(s.tooltip);
      }});
    }});
  }});
}});
</script>
"""
    )


def _traffic_payload(rows, t_cur, radius_scale, id_field):
    scale = radius_scale.with_range(radius_range_for(t_cur))
    return {
        "time_filter": t_cur,
        "label": format_time(t_cur),
        "window": window_label(t_cur),
        "stations": [
            {
                "short_name": s[id_field],
                "departures": s["departures"],
                "arrivals": s["arrivals"],
                "total_traffic": s["total_traffic"],
                "radius": scale(s["total_traffic"]),
                "fill_color": flow_color(s["departures"], s["total_traffic"]),
                "tooltip": station_tooltip(s),
            }
            for s in rows
        ],
    }


def _time_filter_arg():
    raw = request.args.get("t", None)
    if raw is None or raw == "":
        return NO_FILTER
    try:
        return check_time_filter(int(raw))
    except ValueError:
        abort(400, description=f"t must be -1 or a minute in [0, 1439], got {raw!r}")


def create_app(
    *,
    aggregator: TrafficAggregator,
    stations,
    title: str | None = None,
    bike_lanes: bool = False,
):
    """
    Flask app over a loaded TrafficAggregator.

      /         map page for ?t=<minute> (default -1 = any time)
      /traffic  JSON station counts + circle styling for ?t=<minute>,
                polled by the slider while it is dragged
    """
    aggregator.store.require_loaded()

    # radius domain is fixed by the unfiltered totals, only the range changes
    unfiltered = aggregator.compute_station_traffic(stations, NO_FILTER)
    max_total = max((s["total_traffic"] for s in unfiltered), default=0)
    radius_scale = SqrtRadiusScale(max_total)

    per_minute = minute_activity(aggregator.store)
    hourly_counts = hourly_activity(per_minute)
    window_counts = [int(c) for c in windowed_activity(per_minute)]

    print(
        f"{Fore.MAGENTA}{len(stations)} stations, "
        f"busiest has {max_total} trips{Style.RESET_ALL}"
    )

    app = Flask(__name__)

    @app.route("/")
    def _view():
        t_cur = _time_filter_arg()
        rows = aggregator.compute_station_traffic(stations, t_cur)
        return _build_map_document(
            rows,
            t_cur,
            radius_scale,
            title=title,
            hourly_counts=hourly_counts,
            window_counts=window_counts,
            bike_lanes=bike_lanes,
            id_field=aggregator.id_field,
        )

    @app.route("/traffic")
    def _traffic():
        t_cur = _time_filter_arg()
        rows = aggregator.compute_station_traffic(stations, t_cur)
        return jsonify(_traffic_payload(rows, t_cur, radius_scale, aggregator.id_field))

    return app


def serve_traffic_map(
    *,
    aggregator: TrafficAggregator,
    stations,
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    title: str | None = None,
    bike_lanes: bool = False,
):
    """
    Library entrypoint: call this and you get a running website.
    """
    app = create_app(
        aggregator=aggregator,
        stations=stations,
        title=title,
        bike_lanes=bike_lanes,
    )
    app.run(host=host, port=int(port), debug=bool(debug))
