from __future__ import annotations

import asyncio
from datetime import date, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from sleepwatch.handlers.archive import build_archive_kb, build_archive_text, build_export, parse_archive_filter
from sleepwatch.handlers.people import build_people_view, people_toggle_notifications
from sleepwatch.handlers.tracker import build_tracker_view

from .conftest import T0


def buttons(markup):
    return [button.callback_data for row in markup.inline_keyboard for button in row]


def test_tracker_view_without_people(tracker, caregiver_id) -> None:
    text, markup = build_tracker_view("en", [], [], tracker.reminder_settings(caregiver_id), T0)

    assert "No people yet" in text
    assert markup is None


def test_tracker_view_shows_countdown_and_actions(tracker, caregiver_id, timers, clock) -> None:
    mia = tracker.add_person(caregiver_id, "Mia", age=4)
    leo = tracker.add_person(caregiver_id, "Leo")
    session = tracker.start_sleep(caregiver_id, mia.id)
    timers.advance(timedelta(minutes=3, seconds=30))

    text, markup = build_tracker_view(
        "en",
        [mia, leo],
        tracker.active_sessions(caregiver_id),
        tracker.reminder_settings(caregiver_id),
        clock.now,
    )

    assert "Next check-up in 06:30" in text
    assert "4 y.o." in text
    assert "Awake" in text
    assert buttons(markup) == [
        f"track:checkup:{session.id}",
        f"track:end:{session.id}",
        f"track:start:{leo.id}",
        "track:refresh",
    ]


def test_tracker_view_marks_due_checkup(tracker, caregiver_id, timers, clock) -> None:
    mia = tracker.add_person(caregiver_id, "Mia")
    tracker.start_sleep(caregiver_id, mia.id)
    timers.advance_minutes(11)

    text, _ = build_tracker_view(
        "en", [mia], tracker.active_sessions(caregiver_id), tracker.reminder_settings(caregiver_id), clock.now
    )

    assert "Check-up due now" in text


def test_people_view_escapes_names(tracker, caregiver_id) -> None:
    person = tracker.add_person(caregiver_id, "<b>Mia</b>")
    tracker.set_person_notifications(caregiver_id, person.id, False)

    text, markup = build_people_view("en", tracker.list_people(caregiver_id))

    assert "&lt;b&gt;Mia&lt;/b&gt;" in text
    assert "🔕" in text
    assert buttons(markup) == [
        f"people:edit:{person.id}",
        f"people:notify:{person.id}",
        f"people:remove:{person.id}",
        "people:add",
    ]


def test_archive_text_lists_sessions_and_entries(tracker, caregiver_id, timers) -> None:
    mia = tracker.add_person(caregiver_id, "Mia")
    session = tracker.start_sleep(caregiver_id, mia.id)
    timers.advance_minutes(5)
    tracker.log_checkup(caregiver_id, session.id)
    timers.advance_minutes(55)
    tracker.end_sleep(caregiver_id, session.id, notes="calm")

    text = build_archive_text("en", tracker.history(caregiver_id, tz=timezone.utc), tz=timezone.utc)

    assert "Mia: 2024-03-01 21:00 – 22:00 (01:00:00), check-ups: 1" in text
    assert "2024-03-01 21:05 · Mia: Check-up" in text
    assert "calm" in text


def test_archive_text_when_empty() -> None:
    assert "No logs for this filter." in build_archive_text("en", [])


@pytest.mark.parametrize(
    "person, day, expected",
    [
        ("all", "all", (None, None)),
        ("all", "today", (None, date(2024, 3, 5))),
        ("p1", "2024-02-29", ("p1", date(2024, 2, 29))),
    ],
)
def test_parse_archive_filter(person, day, expected) -> None:
    assert parse_archive_filter(person, day, today=date(2024, 3, 5)) == expected


@pytest.mark.parametrize("day", ["yesterday", "2024-13-01", ""])
def test_parse_archive_filter_rejects_bad_days(day) -> None:
    with pytest.raises(ValueError):
        parse_archive_filter("all", day, today=date(2024, 3, 5))


def test_archive_kb_steps_between_days() -> None:
    markup = build_archive_kb("en", [], "all", "2024-03-01", today=date(2024, 3, 5))

    assert buttons(markup) == [
        "archive:all:2024-03-01",
        "archive:all:today",
        "archive:all:all",
        "archive:all:2024-02-29",
        "archive:all:2024-03-01",
        "archive:all:2024-03-02",
        "archive:export:all:2024-03-01",
    ]


def test_archive_kb_stops_at_today() -> None:
    markup = build_archive_kb("en", [], "all", "today", today=date(2024, 3, 5))

    assert "archive:all:2024-03-04" in buttons(markup)
    assert "archive:all:2024-03-06" not in buttons(markup)
    assert [row[0].text for row in markup.inline_keyboard][1] == "• Today"


def test_archive_kb_for_all_time_has_no_day_steps() -> None:
    markup = build_archive_kb("en", [], "all", "all", today=date(2024, 3, 5))

    assert buttons(markup) == ["archive:all:all", "archive:all:today", "archive:all:all", "archive:export:all:all"]


def test_export_covers_the_chosen_day(tracker, caregiver_id, timers) -> None:
    mia = tracker.add_person(caregiver_id, "Mia Rose")
    session = tracker.start_sleep(caregiver_id, mia.id)
    timers.advance_minutes(30)
    tracker.end_sleep(caregiver_id, session.id)

    logs, filename = build_export(tracker, caregiver_id, "all", "2024-03-01", tz=timezone.utc)
    assert filename == "sleep-logs-all-2024-03-01.txt"
    assert [log.action for log in logs] == ["end", "start"]

    logs, filename = build_export(tracker, caregiver_id, mia.id, "2024-02-29", tz=timezone.utc)
    assert filename == "sleep-logs-Mia_Rose-2024-02-29.txt"
    assert logs == []


def test_mute_toggle_for_a_vanished_person_answers_not_found(tracker, caregiver_id, monkeypatch) -> None:
    person = tracker.add_person(caregiver_id, "Mia")
    monkeypatch.setattr(tracker, "set_person_notifications", lambda *args: None)
    call = SimpleNamespace(
        from_user=SimpleNamespace(id=caregiver_id),
        data=f"people:notify:{person.id}",
        message=AsyncMock(),
        answer=AsyncMock(),
    )

    asyncio.run(people_toggle_notifications(call, tracker))

    call.answer.assert_awaited_once_with("Person not found.", show_alert=True)
    call.message.edit_text.assert_not_awaited()
