# bikeflow/viz/time_slider.py
import json

import folium

from bikeflow.trips.minute_buckets import WINDOW_AFTER, WINDOW_BEFORE, window_minutes
from bikeflow.util.time_fmt import ANY_TIME_LABEL, format_hhmm, format_time


def window_label(t_current):
    """"07:21 to 09:20" for the rolling window around t_current, "" for -1."""
    if t_current == -1:
        return ""
    minutes = window_minutes(t_current)
    return f"{format_hhmm(minutes[0])} to {format_hhmm(minutes[-1])}"


def window_readout(t_current, window_counts=None, total_events=None):
    if t_current == -1:
        if total_events is None:
            return ""
        return f"{total_events} departures + arrivals all day"
    if window_counts is None:
        return window_label(t_current)
    return f"{int(window_counts[t_current])} departures + arrivals, {window_label(t_current)}"


def busiest_center(window_counts):
    """Centre minute with the most activity in its window (earliest on ties)."""
    return max(range(len(window_counts)), key=lambda c: window_counts[c])


def build_time_slider(t_current, hourly_counts=None, window_counts=None):
    """
    Time filter slider:
      - range input -1..1439 (-1 = any time)
      - label shows the selected time or "(any time)"
      - optional bars = trips per hour, current hour highlighted
      - optional window_counts = rolling-window activity per centre minute;
        the readout follows the slider while dragging, plus a link to the
        busiest window

    Releasing the slider reloads the page with ?t=<minute>.
    """

    label = format_time(t_current)
    any_display = "block" if t_current == -1 else "none"
    time_text = "" if t_current == -1 else label

    total_events = int(sum(hourly_counts)) if hourly_counts else None
    readout = window_readout(t_current, window_counts, total_events)

    busiest_html = ""
    counts_json = "null"
    if window_counts is not None:
        counts = [int(c) for c in window_counts]
        counts_json = json.dumps(counts)
        if max(counts, default=0) > 0:
            busiest = busiest_center(counts)
            busiest_html = (
                f'<a id="busiest-window" href="?t={busiest}">'
                f"busiest window: {format_time(busiest)}</a>"
            )

    bars = []
    if hourly_counts:
        max_count = max(hourly_counts, default=0)
        cur_hour = None if t_current == -1 else t_current // 60
        for h, c in enumerate(hourly_counts):
            height = int((c / max_count) * 36) if max_count > 0 else 0
            bars.append(
                f"""
            <div class="slider-bar"
                 title="{format_time(h * 60)}: {c} trips"
                 style="height:{height}px; opacity:{'1.0' if h == cur_hour else '0.5'};">
            </div>
            """
            )

    return folium.Element(
        f"""
<style>
#time-filter {{
  position: absolute;
  top: 12px;
  right: 16px;
  z-index: 1300;
  background: rgba(255,255,255,0.95);
  padding: 8px 12px;
  border-radius: 10px;
  font-size: 12px;
  box-shadow: 0 1px 4px rgba(0,0,0,0.2);
  width: 280px;
}}

#time-slider {{
  width: 100%;
}}

#selected-time {{
  font-weight: 600;
}}

#any-time {{
  color: #666;
  font-style: italic;
}}

#window-trips {{
  color: #444;
  margin-top: 4px;
}}

#slider-bars {{
  display: flex;
  align-items: flex-end;
  height: 36px;
  gap: 2px;
}}

.slider-bar {{
  flex: 1;
  background: #4682b4;
  border-radius: 1px;
}}
</style>

<div id="time-filter">
  <label>Filter by time:
    <input id="time-slider" type="range" min="-1" max="1439" value="{t_current}">
  </label>
  <time id="selected-time">{time_text}</time>
  <em id="any-time" style="display:{any_display};">{ANY_TIME_LABEL}</em>
  <div id="window-trips">{readout}</div>
  {busiest_html}
  <div id="slider-bars">{''.join(bars)}</div>
</div>

<script>
(function() {{
  const slider = document.getElementById("time-slider");
  const selected = document.getElementById("selected-time");
  const anyTime = document.getElementById("any-time");
  const readout = document.getElementById("window-trips");
  const WINDOW_COUNTS = {counts_json};
  const TOTAL_EVENTS = {json.dumps(total_events)};
  if (!slider) return;

  function fmt(minutes) {{
    const d = new Date(0, 0, 0, 0, minutes);
    return d.toLocaleString("en-US", {{ timeStyle: "short" }});
  }}

  function hhmm(minutes) {{
    const m = ((minutes % 1440) + 1440) % 1440;
    return String(Math.floor(m / 60)).padStart(2, "0") + ":" + String(m % 60).padStart(2, "0");
  }}

  function updateReadout(t) {{
    if (!readout) return;
    if (t === -1) {{
      readout.textContent = TOTAL_EVENTS === null ? "" : TOTAL_EVENTS + " departures + arrivals all day";
      return;
    }}
    const range = hhmm(t - {WINDOW_BEFORE}) + " to " + hhmm(t + {WINDOW_AFTER});
    readout.textContent = WINDOW_COUNTS === null
      ? range
      : WINDOW_COUNTS[t] + " departures + arrivals, " + range;
  }}

  slider.addEventListener("input", () => {{
    const t = Number(slider.value);
    if (t === -1) {{
      selected.textContent = "";
      anyTime.style.display = "block";
    }} else {{
      selected.textContent = fmt(t);
      anyTime.style.display = "none";
    }}
    updateReadout(t);
  }});

  slider.addEventListener("change", () => {{
    const url = new URL(window.location.href);
    url.searchParams.set("t", String(slider.value));
    window.location.href = url.toString();
  }});
}})();
</script>
"""
    )
