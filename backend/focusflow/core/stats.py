"""Focus statistics computed from recorded timer sessions.

Every function accepts any iterable of objects shaped like
``focusflow.db.models.TimerSession`` (``is_break``, ``skipped``,
``start_time``, ``end_time``, ``duration``), so they work on ORM rows and on
plain test doubles alike.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta, UTC
from typing import Dict, Iterable, List, Optional, Tuple

DAYS_OF_WEEK = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def format_time(seconds: int) -> str:
    """Render a countdown as ``MM:SS``."""
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes:02d}:{secs:02d}"


def format_duration(seconds: Optional[int]) -> str:
    """Render a duration as e.g. ``2h 30m`` or ``45m 30s``.

    Minutes are dropped once days are shown and seconds once hours are.
    """
    if not seconds or seconds < 0:
        return "0s"
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes and not days:
        parts.append(f"{minutes}m")
    if secs and not hours and not days:
        parts.append(f"{secs}s")
    return " ".join(parts) if parts else "0s"


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def completed_work_sessions(sessions: Iterable) -> List:
    """Work sessions that ran to an end without being skipped."""
    return [
        session
        for session in sessions
        if not session.is_break and session.end_time is not None and not session.skipped
    ]


def total_focus_seconds(sessions: Iterable) -> int:
    total = 0
    for session in completed_work_sessions(sessions):
        if session.duration:
            total += session.duration
        elif session.start_time is not None:
            delta = _aware(session.end_time) - _aware(session.start_time)
            total += int(delta.total_seconds())
    return total


def average_session_minutes(sessions: Iterable) -> int:
    durations = [
        session.duration
        for session in completed_work_sessions(sessions)
        if session.duration
    ]
    if not durations:
        return 0
    return round(sum(durations) / 60 / len(durations))


def group_sessions_by_day(sessions: Iterable) -> Dict[date, List]:
    groups: Dict[date, List] = defaultdict(list)
    for session in sessions:
        if session.start_time is None:
            continue
        groups[_aware(session.start_time).date()].append(session)
    return dict(groups)


def daily_focus(
    sessions: Iterable, start: date, end: date
) -> List[Tuple[date, int, int]]:
    """Per-day ``(day, focus_minutes, completed_pomodoros)`` from *start* to *end*.

    Days without a completed pomodoro are included with zeros.
    """
    groups = group_sessions_by_day(completed_work_sessions(sessions))
    series = []
    day = start
    while day <= end:
        completed = groups.get(day, [])
        series.append((day, round(total_focus_seconds(completed) / 60), len(completed)))
        day += timedelta(days=1)
    return series


def most_productive_day(sessions: Iterable) -> Tuple[str, int]:
    """Weekday with the most focused time, as ``(name, minutes)``."""
    totals: Dict[str, int] = defaultdict(int)
    for session in completed_work_sessions(sessions):
        if session.start_time is None:
            continue
        weekday = DAYS_OF_WEEK[_aware(session.start_time).weekday()]
        totals[weekday] += session.duration or 0
    if not totals:
        return "No data", 0
    day, seconds = max(totals.items(), key=lambda item: item[1])
    return day, round(seconds / 60)


def _completion_days(sessions: Iterable) -> List[date]:
    return sorted(
        {_aware(session.end_time).date() for session in completed_work_sessions(sessions)}
    )


def current_streak(sessions: Iterable, today: Optional[date] = None) -> int:
    """Consecutive days, ending today or yesterday, with a completed pomodoro."""
    days = set(_completion_days(sessions))
    if not days:
        return 0
    cursor = today or datetime.now(UTC).date()
    if cursor not in days:
        cursor -= timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(sessions: Iterable) -> int:
    days = _completion_days(sessions)
    best = run = 0
    previous = None
    for day in days:
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def last_active(sessions: Iterable) -> Optional[datetime]:
    ends = [_aware(session.end_time) for session in completed_work_sessions(sessions)]
    return max(ends) if ends else None
