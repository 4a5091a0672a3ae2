from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from sleepwatch.models.sleep_log import SleepLog
from sleepwatch.services.history import (
    export_filename,
    export_text,
    filter_logs,
    format_duration,
    summarize_sessions,
)

UTC = timezone.utc
PLUS3 = timezone(timedelta(hours=3))


def make_log(log_id, action, ts, person_id="p1", name="Mia", session_id="s1", notes=None) -> SleepLog:
    return SleepLog(
        id=log_id,
        owner_id=1,
        person_id=person_id,
        person_name=name,
        action=action,
        timestamp=ts,
        session_id=session_id,
        notes=notes,
    )


def night():
    start = datetime(2024, 3, 1, 22, 0, tzinfo=UTC)
    return [
        make_log(1, "start", start),
        make_log(2, "checkup", start + timedelta(minutes=10)),
        make_log(3, "checkup", start + timedelta(minutes=20)),
        make_log(4, "end", start + timedelta(hours=8, minutes=5, seconds=7), notes="fine"),
        make_log(5, "start", start + timedelta(minutes=30), person_id="p2", name="Leo", session_id="s2"),
    ]


def test_filter_logs_newest_first() -> None:
    logs = filter_logs(night())

    assert [log.id for log in logs] == [4, 5, 3, 2, 1]


def test_filter_logs_by_person() -> None:
    assert [log.id for log in filter_logs(night(), person_id="p2")] == [5]


def test_filter_logs_by_local_day() -> None:
    # 22:00 UTC on March 1st is already March 2nd at UTC+3
    assert [log.id for log in filter_logs(night(), day=date(2024, 3, 1), tz=UTC)] == [5, 3, 2, 1]
    assert [log.id for log in filter_logs(night(), day=date(2024, 3, 2), tz=PLUS3)] == [4, 5, 3, 2, 1]
    assert filter_logs(night(), day=date(2024, 3, 1), tz=PLUS3) == []


def test_summarize_sessions_pairs_start_and_end() -> None:
    summaries = summarize_sessions(night())

    assert len(summaries) == 1
    summary = summaries[0]
    assert summary.session_id == "s1"
    assert summary.checkups == 2
    assert summary.notes == "fine"
    assert format_duration(summary.duration) == "08:05:07"


def test_format_duration_clamps_negative() -> None:
    assert format_duration(timedelta(seconds=-5)) == "00:00:00"
    assert format_duration(timedelta(hours=26, seconds=1)) == "26:00:01"


def test_export_text() -> None:
    logs = filter_logs(night(), person_id="p1")

    text = export_text(logs, "en", tz=UTC)

    assert text.splitlines() == [
        "2024-03-02 06:05 - Mia: WOKE UP",
        "  Notes: fine",
        "2024-03-01 22:20 - Mia: CHECK-UP",
        "2024-03-01 22:10 - Mia: CHECK-UP",
        "2024-03-01 22:00 - Mia: FELL ASLEEP",
    ]


def test_export_filename() -> None:
    assert export_filename("Mia Rose", date(2024, 3, 1)) == "sleep-logs-Mia_Rose-2024-03-01.txt"
    assert export_filename("all") == "sleep-logs-all-all.txt"
