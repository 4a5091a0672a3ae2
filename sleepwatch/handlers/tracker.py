from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from aiogram import F, html, types
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message
from aiogram.utils.keyboard import InlineKeyboardBuilder

from .start import router
from sleepwatch.database import utcnow
from sleepwatch.models.person import Person
from sleepwatch.services.checkup_scheduler import ReminderSettings, SleepSession
from sleepwatch.services.history import format_time
from sleepwatch.services.i18n import t
from sleepwatch.services.tracker import SleepTracker


class EndSleepStates(StatesGroup):
    waiting_notes = State()


def _format_countdown(seconds: int) -> str:
    minutes, seconds = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"


def _person_block(lang: str, person: Person, session: Optional[SleepSession], settings: ReminderSettings, now: datetime) -> str:
    title = f"👤 {html.bold(html.quote(person.name))}"
    if person.age:
        title += f" ({t(lang, 'people.age_short', age=person.age)})"
    if session is None:
        return f"{title}\n{t(lang, 'tracker.awake')}"

    lines = [
        title,
        t(lang, "tracker.sleeping_since", time=format_time(session.started_at), count=len(session.checkups)),
    ]
    if session.checkups:
        minutes_ago = int((now - session.checkups[-1]).total_seconds() // 60)
        lines.append(t(lang, "tracker.last_checkup", minutes=minutes_ago))
    remaining = session.due_in(settings.checkup_interval, now)
    if remaining.total_seconds() <= 0:
        lines.append(t(lang, "tracker.checkup_due"))
    else:
        lines.append(t(lang, "tracker.next_checkup", countdown=_format_countdown(int(remaining.total_seconds()))))
    return "\n".join(lines)


def build_tracker_view(
    lang: str,
    people: List[Person],
    sessions: List[SleepSession],
    settings: ReminderSettings,
    now: datetime,
) -> Tuple[str, Optional[types.InlineKeyboardMarkup]]:
    """Render the tracker screen: one block and one button row per person."""
    if not people:
        return f"{t(lang, 'tracker.title')}\n\n{t(lang, 'tracker.no_people')}", None

    by_person: Dict[str, SleepSession] = {s.person_id: s for s in sessions}
    blocks = [_person_block(lang, p, by_person.get(p.id), settings, now) for p in people]
    text = f"{t(lang, 'tracker.title')}\n\n" + "\n\n".join(blocks)

    kb = InlineKeyboardBuilder()
    rows = []
    for person in people:
        session = by_person.get(person.id)
        if session is None:
            kb.button(text=t(lang, "tracker.btn_start", name=person.name), callback_data=f"track:start:{person.id}")
            rows.append(1)
        else:
            kb.button(
                text=t(lang, "tracker.btn_checkup", name=person.name, count=len(session.checkups)),
                callback_data=f"track:checkup:{session.id}",
            )
            kb.button(text=t(lang, "tracker.btn_end"), callback_data=f"track:end:{session.id}")
            rows.append(2)
    kb.button(text=t(lang, "tracker.btn_refresh"), callback_data="track:refresh")
    rows.append(1)
    kb.adjust(*rows)
    return text, kb.as_markup()


def _render(tracker: SleepTracker, user_id: int):
    lang = tracker.get_language(user_id)
    return build_tracker_view(
        lang,
        tracker.list_people(user_id),
        tracker.active_sessions(user_id),
        tracker.reminder_settings(user_id),
        utcnow(),
    )


async def show_tracker(message: Message, tracker: SleepTracker):
    """Send the tracker screen as a new message."""
    text, markup = _render(tracker, message.from_user.id)
    await message.answer(text, reply_markup=markup)


async def _refresh(call: CallbackQuery, tracker: SleepTracker):
    text, markup = _render(tracker, call.from_user.id)
    await call.message.edit_text(text, reply_markup=markup)


@router.message(Command("tracker"))
async def cmd_tracker(message: Message, state: FSMContext, tracker: SleepTracker):
    await state.clear()
    await show_tracker(message, tracker)


@router.callback_query(F.data == "track:refresh")
async def refresh_tracker(call: CallbackQuery, tracker: SleepTracker):
    await _refresh(call, tracker)
    await call.answer()


@router.callback_query(F.data.startswith("track:start:"))
async def start_sleep(call: CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    person_id = call.data.split(":", 2)[2]
    session = tracker.start_sleep(call.from_user.id, person_id)
    if session is None:
        await call.answer(t(lang, "tracker.start_failed"), show_alert=True)
        return
    await _refresh(call, tracker)
    await call.answer(t(lang, "tracker.started", name=session.person_name))


@router.callback_query(F.data.startswith("track:checkup:"))
async def log_checkup(call: CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    session_id = call.data.split(":", 2)[2]
    session = tracker.log_checkup(call.from_user.id, session_id)
    if session is None:
        await call.answer(t(lang, "tracker.session_not_found"), show_alert=True)
        return
    await _refresh(call, tracker)
    await call.answer(t(lang, "tracker.checkup_logged", name=session.person_name))


def _skip_notes_kb(lang: str) -> types.InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text=t(lang, "btn_skip"), callback_data="track:end_skip")
    kb.button(text=t(lang, "btn_cancel"), callback_data="track:end_cancel")
    kb.adjust(2)
    return kb.as_markup()


@router.callback_query(F.data.startswith("track:end:"))
async def ask_end_notes(call: CallbackQuery, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    session_id = call.data.split(":", 2)[2]
    session = tracker.get_session(call.from_user.id, session_id)
    if session is None:
        await call.answer(t(lang, "tracker.session_not_found"), show_alert=True)
        return
    await state.set_state(EndSleepStates.waiting_notes)
    await state.update_data(session_id=session_id)
    await call.message.answer(t(lang, "tracker.end_prompt", name=html.quote(session.person_name)), reply_markup=_skip_notes_kb(lang))
    await call.answer()


async def _finish(message: Message, user_id: int, state: FSMContext, tracker: SleepTracker, notes: Optional[str]):
    lang = tracker.get_language(user_id)
    data = await state.get_data()
    await state.clear()
    session = tracker.end_sleep(user_id, data.get("session_id", ""), notes=notes)
    if session is None:
        await message.answer(t(lang, "tracker.session_not_found"))
        return
    await message.answer(t(lang, "tracker.ended", name=html.quote(session.person_name), count=len(session.checkups)))
    text, markup = _render(tracker, user_id)
    await message.answer(text, reply_markup=markup)


@router.message(EndSleepStates.waiting_notes)
async def end_with_notes(message: Message, state: FSMContext, tracker: SleepTracker):
    await _finish(message, message.from_user.id, state, tracker, notes=message.text)


@router.callback_query(EndSleepStates.waiting_notes, F.data == "track:end_skip")
async def end_without_notes(call: CallbackQuery, state: FSMContext, tracker: SleepTracker):
    await call.message.edit_reply_markup(reply_markup=None)
    await _finish(call.message, call.from_user.id, state, tracker, notes=None)
    await call.answer()


@router.callback_query(F.data == "track:end_cancel")
async def end_cancel(call: CallbackQuery, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    await state.clear()
    await call.message.edit_text(t(lang, "tracker.end_cancelled"))
    await call.answer()
