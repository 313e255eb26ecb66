from __future__ import annotations
from datetime import date, datetime, time, timedelta, timezone as dt_tz
from zoneinfo import ZoneInfo

from app.schemas.offer import DAYS_OF_WEEK, parse_hhmm


def local_window_to_utc(d: date, start_local: time, end_local: time, tz_name: str) -> tuple[datetime, datetime]:
    """
    Convert a local wall-clock window (start->end) on date `d` in timezone `tz_name`
    to UTC datetimes. Supports overnight windows (end <= start).

    DST rules:
      - If a local time does not exist (spring forward), start/end is shifted to the next valid instant.
      - If a time is ambiguous (fall back), the full repeated hour is considered in-window (choose first fold).

    Examples:
        >>> from datetime import date, time
        >>> d = date(2025, 1, 10)  # EST = UTC-5
        >>> start, end = local_window_to_utc(d, time(18, 0), time(22, 0), "America/New_York")
        >>> start.hour, end.hour
        (23, 3)
    """
    tz = ZoneInfo(tz_name)

    def _aware(d: date, t: time) -> datetime:
        return datetime(d.year, d.month, d.day, t.hour, t.minute, t.second, t.microsecond, tzinfo=tz, fold=0)

    start_dt_local = _aware(d, start_local)
    end_dt_local = _aware(d, end_local)

    # Overnight windows (e.g., 22:00-02:00) end on the next calendar day
    if end_local <= start_local:
        end_dt_local += timedelta(days=1)

    start_utc = start_dt_local.astimezone(dt_tz.utc)
    end_utc = end_dt_local.astimezone(dt_tz.utc)

    if end_utc <= start_utc:
        # Window collapsed inside a DST gap; nudge end past it
        end_utc += timedelta(hours=1)

    return start_utc, end_utc


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored is UTC
    return dt.replace(tzinfo=dt_tz.utc) if dt.tzinfo is None else dt.astimezone(dt_tz.utc)


def recurring_window_covers(
    now_utc: datetime,
    days_of_week: list[str],
    start_hhmm: str,
    end_hhmm: str,
    tz_name: str,
) -> bool:
    """
    True if `now_utc` falls in the weekly window. A window opening late on one
    of `days_of_week` and running past midnight still belongs to its opening day,
    so yesterday's window is checked as well as today's.
    """
    start_t, end_t = parse_hhmm(start_hhmm), parse_hhmm(end_hhmm)
    local_today = now_utc.astimezone(ZoneInfo(tz_name)).date()
    for anchor in (local_today - timedelta(days=1), local_today):
        if DAYS_OF_WEEK[anchor.weekday()] not in days_of_week:
            continue
        start_utc, end_utc = local_window_to_utc(anchor, start_t, end_t, tz_name)
        if start_utc <= now_utc < end_utc:
            return True
    return False


def offer_is_running(offer, now_utc: datetime, tz_name: str) -> bool:
    """Whether an offer's schedule (one-time or recurring) covers `now_utc`."""
    if not offer.is_active:
        return False
    if offer.start_time is not None and offer.end_time is not None:
        return _as_utc(offer.start_time) <= now_utc < _as_utc(offer.end_time)
    if offer.days_of_week and offer.recurring_start_time and offer.recurring_end_time:
        return recurring_window_covers(
            now_utc, offer.days_of_week, offer.recurring_start_time, offer.recurring_end_time, tz_name
        )
    return False
