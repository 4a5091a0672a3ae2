from __future__ import annotations

from aiogram import F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message

from .start import router
from sleepwatch.config import MAX_INTERVAL_MIN
from sleepwatch.services.i18n import t
from sleepwatch.services.settings import build_language_kb, build_settings_menu_kb, parse_minutes
from sleepwatch.services.tracker import SleepTracker


class IntervalStates(StatesGroup):
    checkup = State()
    alarm = State()


def _settings_text(tracker: SleepTracker, user_id: int) -> str:
    caregiver = tracker.ensure_caregiver(user_id)
    lang = caregiver.language or "en"
    status = t(lang, "settings.on") if caregiver.notifications_enabled else t(lang, "settings.off")
    return "\n".join(
        [
            t(lang, "settings.title"),
            "",
            t(lang, "settings.notifications", status=status),
            t(lang, "settings.checkup_interval", minutes=caregiver.checkup_interval_min),
            t(lang, "settings.alarm_interval", minutes=caregiver.alarm_interval_min),
        ]
    )


def _settings_markup(tracker: SleepTracker, user_id: int):
    caregiver = tracker.ensure_caregiver(user_id)
    return build_settings_menu_kb(caregiver.language or "en", caregiver.notifications_enabled).as_markup()


async def show_settings(message: Message, tracker: SleepTracker):
    user_id = message.from_user.id
    await message.answer(_settings_text(tracker, user_id), reply_markup=_settings_markup(tracker, user_id))


@router.message(Command("settings"))
async def cmd_settings(message: Message, state: FSMContext, tracker: SleepTracker):
    await state.clear()
    await show_settings(message, tracker)


@router.callback_query(F.data == "settings:notifications")
async def toggle_notifications(call: CallbackQuery, tracker: SleepTracker):
    user_id = call.from_user.id
    enabled = tracker.toggle_notifications(user_id)
    lang = tracker.get_language(user_id)
    await call.message.edit_text(_settings_text(tracker, user_id), reply_markup=_settings_markup(tracker, user_id))
    await call.answer(t(lang, "settings.notifications_enabled" if enabled else "settings.notifications_disabled"))


@router.callback_query(F.data == "settings:checkup")
async def ask_checkup_interval(call: CallbackQuery, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    await state.set_state(IntervalStates.checkup)
    await call.message.answer(t(lang, "settings.ask_checkup_interval"))
    await call.answer()


@router.callback_query(F.data == "settings:alarm")
async def ask_alarm_interval(call: CallbackQuery, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    await state.set_state(IntervalStates.alarm)
    await call.message.answer(t(lang, "settings.ask_alarm_interval"))
    await call.answer()


@router.message(IntervalStates.checkup)
async def save_checkup_interval(message: Message, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(message.from_user.id)
    minutes = parse_minutes(message.text)
    if minutes is None:
        await message.answer(t(lang, "settings.invalid_minutes", max=MAX_INTERVAL_MIN))
        return
    await state.clear()
    tracker.set_checkup_interval(message.from_user.id, minutes)
    await message.answer(t(lang, "settings.checkup_saved", minutes=minutes))
    await show_settings(message, tracker)


@router.message(IntervalStates.alarm)
async def save_alarm_interval(message: Message, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(message.from_user.id)
    minutes = parse_minutes(message.text)
    if minutes is None:
        await message.answer(t(lang, "settings.invalid_minutes", max=MAX_INTERVAL_MIN))
        return
    await state.clear()
    tracker.set_alarm_interval(message.from_user.id, minutes)
    await message.answer(t(lang, "settings.alarm_saved", minutes=minutes))
    await show_settings(message, tracker)


@router.callback_query(F.data == "settings:lang")
async def settings_change_lang(call: CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    await call.message.edit_text(t(lang, "start.choose_language"), reply_markup=build_language_kb(lang).as_markup())
    await call.answer()


@router.callback_query(F.data.startswith("lang:"))
async def pick_language(call: CallbackQuery, tracker: SleepTracker):
    from .menu import build_main_menu_kb

    new_lang = call.data.split(":", 1)[1]
    try:
        tracker.ensure_caregiver(call.from_user.id, language=new_lang)
    except ValueError:
        await call.answer()
        return
    user_id = call.from_user.id
    await call.message.edit_text(_settings_text(tracker, user_id), reply_markup=_settings_markup(tracker, user_id))
    # the reply keyboard can only be replaced by a new message
    await call.message.answer(t(new_lang, "start.lang_chosen"), reply_markup=build_main_menu_kb(new_lang))
    await call.answer()
