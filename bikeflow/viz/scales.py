# bikeflow/viz/scales.py
import math

DEPARTURES_COLOR = "#4682b4"  # steelblue
ARRIVALS_COLOR = "#ff8c00"  # darkorange

UNFILTERED_RADIUS_RANGE = (0.0, 25.0)
FILTERED_RADIUS_RANGE = (3.0, 50.0)

FLOW_LEVELS = (0.0, 0.5, 1.0)


class SqrtRadiusScale:
    """
    Square-root scale: radius grows with sqrt(total_traffic), so circle
    area tracks traffic.
    """

    def __init__(self, domain_max, radius_range=UNFILTERED_RADIUS_RANGE):
        self.domain_max = max(0.0, float(domain_max))
        self.radius_range = radius_range

    def with_range(self, radius_range):
        return SqrtRadiusScale(self.domain_max, radius_range)

    def __call__(self, value):
        r0, r1 = self.radius_range
        if self.domain_max <= 0:
            return r0
        v = max(0.0, float(value))
        return r0 + (r1 - r0) * math.sqrt(v) / math.sqrt(self.domain_max)


def radius_range_for(time_filter):
    return UNFILTERED_RADIUS_RANGE if time_filter == -1 else FILTERED_RADIUS_RANGE


def departure_ratio(departures, total_traffic):
    if total_traffic == 0:
        return 0.5
    return departures / total_traffic


def quantize_flow(ratio):
    """[0, 1] -> 0 (mostly arrivals), 0.5 (balanced) or 1 (mostly departures)."""
    n = len(FLOW_LEVELS)
    idx = int(math.floor(float(ratio) * n))
    idx = max(0, min(n - 1, idx))
    return FLOW_LEVELS[idx]


def _hex_to_rgb(h):
    h = h.lstrip("#")
    return tuple(int(h[i:i + 2], 16) for i in (0, 2, 4))


def mix_colors(a, b, t):
    """t=1 -> a, t=0 -> b."""
    ra, ga, ba = _hex_to_rgb(a)
    rb, gb, bb = _hex_to_rgb(b)
    mix = [round(x * t + y * (1 - t)) for x, y in ((ra, rb), (ga, gb), (ba, bb))]
    return "#{:02x}{:02x}{:02x}".format(*mix)


def flow_color(departures, total_traffic):
    level = quantize_flow(departure_ratio(departures, total_traffic))
    return mix_colors(DEPARTURES_COLOR, ARRIVALS_COLOR, level)
