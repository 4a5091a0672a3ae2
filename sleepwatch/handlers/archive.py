from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from aiogram import F, html
from aiogram.filters import Command, CommandObject
from aiogram.types import BufferedInputFile, CallbackQuery, Message
from aiogram.utils.keyboard import InlineKeyboardBuilder
from tzlocal import get_localzone

from .start import router
from sleepwatch.models.person import Person
from sleepwatch.services.history import (
    export_filename,
    export_text,
    format_duration,
    format_time,
    format_timestamp,
    summarize_sessions,
)
from sleepwatch.services.i18n import t
from sleepwatch.services.tracker import SleepTracker

# Telegram caps a message at 4096 characters
MAX_LOG_LINES = 25
MAX_SESSION_LINES = 5


def _today() -> date:
    return datetime.now(get_localzone()).date()


def parse_archive_filter(person: str, day: str, today: Optional[date] = None) -> Tuple[Optional[str], Optional[date]]:
    """Resolve callback tokens to a person id and a local day.

    The day is "all", "today" or an ISO date. Anything else raises ValueError.
    """
    person_id = None if person == "all" else person
    if day == "all":
        return person_id, None
    if day == "today":
        return person_id, today or _today()
    return person_id, date.fromisoformat(day)


def build_archive_kb(lang: str, people: List[Person], person: str, day: str, today: Optional[date] = None):
    today = today or _today()
    _, selected = parse_archive_filter(person, day, today)
    kb = InlineKeyboardBuilder()
    rows = []
    choices = [("all", t(lang, "archive.all_people"))] + [(p.id, p.name) for p in people]
    for key, label in choices:
        mark = "• " if key == person else ""
        kb.button(text=f"{mark}{label}", callback_data=f"archive:{key}:{day}")
    rows.extend([2] * (len(choices) // 2) + [1] * (len(choices) % 2))
    for key, label in (("today", t(lang, "archive.today")), ("all", t(lang, "archive.all_time"))):
        chosen = selected is None if key == "all" else selected == today
        mark = "• " if chosen else ""
        kb.button(text=f"{mark}{label}", callback_data=f"archive:{person}:{key}")
    rows.append(2)
    if selected is not None:
        # step through single days; no stepping past today
        previous = selected - timedelta(days=1)
        kb.button(text="◀️", callback_data=f"archive:{person}:{previous.isoformat()}")
        kb.button(text=selected.isoformat(), callback_data=f"archive:{person}:{selected.isoformat()}")
        if selected < today:
            following = selected + timedelta(days=1)
            kb.button(text="▶️", callback_data=f"archive:{person}:{following.isoformat()}")
            rows.append(3)
        else:
            rows.append(2)
    kb.button(text=t(lang, "archive.btn_export"), callback_data=f"archive:export:{person}:{day}")
    rows.append(1)
    kb.adjust(*rows)
    return kb.as_markup()


def build_archive_text(lang: str, logs, tz=None) -> str:
    if not logs:
        return f"{t(lang, 'archive.title')}\n\n{t(lang, 'archive.empty')}"

    lines = [t(lang, "archive.title"), ""]
    summaries = summarize_sessions(logs)
    if summaries:
        lines.append(html.bold(t(lang, "archive.sessions")))
        for summary in summaries[:MAX_SESSION_LINES]:
            lines.append(
                t(
                    lang,
                    "archive.session_line",
                    name=html.quote(summary.person_name),
                    start=format_timestamp(summary.started_at, tz),
                    end=format_time(summary.ended_at, tz),
                    duration=format_duration(summary.duration),
                    count=summary.checkups,
                )
            )
        lines.append("")

    lines.append(html.bold(t(lang, "archive.entries")))
    for log in logs[:MAX_LOG_LINES]:
        action = t(lang, f"action.{log.action}")
        lines.append(f"{format_timestamp(log.timestamp, tz)} · {html.quote(log.person_name)}: {action}")
        if log.notes:
            lines.append(f"   {html.italic(html.quote(log.notes))}")
    if len(logs) > MAX_LOG_LINES:
        lines.append(t(lang, "archive.more", count=len(logs) - MAX_LOG_LINES))
    return "\n".join(lines)


def _view(tracker: SleepTracker, user_id: int, person: str = "all", day: str = "today"):
    lang = tracker.get_language(user_id)
    person_id, day_value = parse_archive_filter(person, day)
    logs = tracker.history(user_id, person_id=person_id, day=day_value)
    markup = build_archive_kb(lang, tracker.list_people(user_id), person, day)
    return build_archive_text(lang, logs), markup


def build_export(tracker: SleepTracker, user_id: int, person: str, day: str, tz=None):
    """Logs and file name for an export of the given filter."""
    person_id, day_value = parse_archive_filter(person, day)
    logs = tracker.history(user_id, person_id=person_id, day=day_value, tz=tz)
    label = "all"
    if person_id is not None:
        found: Optional[Person] = tracker.get_person(user_id, person_id)
        label = found.name if found else person_id
    return logs, export_filename(label, day_value)


async def show_archive(message: Message, tracker: SleepTracker, day: str = "today"):
    text, markup = _view(tracker, message.from_user.id, day=day)
    await message.answer(text, reply_markup=markup)


@router.message(Command("archive"))
async def cmd_archive(message: Message, command: CommandObject, tracker: SleepTracker):
    # /archive 2024-03-01 opens that day
    day = (command.args or "").strip() or "today"
    try:
        parse_archive_filter("all", day)
    except ValueError:
        await message.answer(t(tracker.get_language(message.from_user.id), "archive.invalid_date"))
        return
    await show_archive(message, tracker, day)


@router.callback_query(F.data.startswith("archive:export:"))
async def archive_export(call: CallbackQuery, tracker: SleepTracker):
    user_id = call.from_user.id
    lang = tracker.get_language(user_id)
    _, _, person, day = call.data.split(":", 3)
    try:
        logs, filename = build_export(tracker, user_id, person, day)
    except ValueError:
        await call.answer(t(lang, "archive.invalid_date"), show_alert=True)
        return
    if not logs:
        await call.answer(t(lang, "archive.empty"), show_alert=True)
        return

    document = BufferedInputFile(export_text(logs, lang).encode("utf-8"), filename=filename)
    await call.message.answer_document(document, caption=t(lang, "archive.export_caption", count=len(logs)))
    await call.answer()


@router.callback_query(F.data.startswith("archive:"))
async def archive_filter(call: CallbackQuery, tracker: SleepTracker):
    _, person, day = call.data.split(":", 2)
    try:
        text, markup = _view(tracker, call.from_user.id, person, day)
    except ValueError:
        await call.answer(t(tracker.get_language(call.from_user.id), "archive.invalid_date"), show_alert=True)
        return
    await call.message.edit_text(text, reply_markup=markup)
    await call.answer()
