# bikeflow/util/time_fmt.py

ANY_TIME_LABEL = "(any time)"


def format_time(minutes: int) -> str:
    """
    Minute of day -> short 12-hour clock label.

      0    -> "12:00 AM"
      495  -> "8:15 AM"
      1439 -> "11:59 PM"
      -1   -> "(any time)"
    """
    if minutes == -1:
        return ANY_TIME_LABEL

    hh = int(minutes // 60) % 24
    mm = int(minutes % 60)
    suffix = "AM" if hh < 12 else "PM"
    h12 = hh % 12 or 12
    return f"{h12}:{mm:02d} {suffix}"


def format_hhmm(minutes: int) -> str:
    return f"{int(minutes // 60):02d}:{int(minutes % 60):02d}"
