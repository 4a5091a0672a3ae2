from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from tzlocal import get_localzone

from sleepwatch.services.i18n import t


@dataclass(frozen=True)
class SessionSummary:
    session_id: str
    person_id: str
    person_name: str
    started_at: datetime
    ended_at: datetime
    checkups: int
    notes: Optional[str] = None

    @property
    def duration(self) -> timedelta:
        return self.ended_at - self.started_at


def _local(ts: datetime, tz=None) -> datetime:
    return ts.astimezone(tz or get_localzone())


def filter_logs(logs: Iterable, person_id: Optional[str] = None, day: Optional[date] = None, tz=None) -> List:
    """Return logs matching the person and local calendar day, newest first."""
    result = [
        log
        for log in logs
        if (person_id is None or log.person_id == person_id)
        and (day is None or _local(log.timestamp, tz).date() == day)
    ]
    return sorted(result, key=lambda log: (log.timestamp, log.id or 0), reverse=True)


def summarize_sessions(logs: Iterable) -> List[SessionSummary]:
    """Pair start and end entries into completed sessions, newest first."""
    starts, ends = {}, {}
    checkups: Counter = Counter()
    for log in logs:
        if log.action == "start":
            starts[log.session_id] = log
        elif log.action == "end":
            ends[log.session_id] = log
        elif log.action == "checkup":
            checkups[log.session_id] += 1

    summaries = [
        SessionSummary(
            session_id=session_id,
            person_id=start.person_id,
            person_name=start.person_name,
            started_at=start.timestamp,
            ended_at=ends[session_id].timestamp,
            checkups=checkups[session_id],
            notes=ends[session_id].notes,
        )
        for session_id, start in starts.items()
        if session_id in ends
    ]
    return sorted(summaries, key=lambda s: s.started_at, reverse=True)


def format_duration(delta: timedelta) -> str:
    total = max(0, int(delta.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_timestamp(ts: datetime, tz=None) -> str:
    return _local(ts, tz).strftime("%Y-%m-%d %H:%M")


def format_time(ts: datetime, tz=None) -> str:
    return _local(ts, tz).strftime("%H:%M")


def export_text(logs: Iterable, lang: str, tz=None) -> str:
    """Plain-text export, one line per entry with notes indented below."""
    lines = []
    for log in logs:
        action = t(lang, f"action.{log.action}").upper()
        lines.append(f"{format_timestamp(log.timestamp, tz)} - {log.person_name}: {action}")
        if log.notes:
            lines.append(f"  {t(lang, 'archive.notes')}: {log.notes}")
    return "\n".join(lines)


def export_filename(person_label: str, day: Optional[date] = None) -> str:
    label = re.sub(r"\s+", "_", person_label.strip()) or "all"
    return f"sleep-logs-{label}-{day.isoformat() if day else 'all'}.txt"
