from __future__ import annotations

from typing import List, Optional

from aiogram import F, html
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message
from aiogram.utils.keyboard import InlineKeyboardBuilder

from .start import router
from sleepwatch.models.person import MAX_NAME_LENGTH, Person
from sleepwatch.services.i18n import t
from sleepwatch.services.settings import is_skip, parse_age
from sleepwatch.services.tracker import SleepTracker


class PersonStates(StatesGroup):
    name = State()
    age = State()
    notes = State()


def _person_line(lang: str, person: Person) -> str:
    line = f"👤 {html.bold(html.quote(person.name))}"
    if person.age:
        line += f" ({t(lang, 'people.age_short', age=person.age)})"
    if not person.notifications_enabled:
        line += " 🔕"
    if person.notes:
        line += f"\n   {html.italic(html.quote(person.notes))}"
    return line


def build_people_view(lang: str, people: List[Person]):
    """People list with edit, mute and remove buttons per person."""
    kb = InlineKeyboardBuilder()
    rows = []
    if people:
        text = f"{t(lang, 'people.title')}\n\n" + "\n".join(_person_line(lang, p) for p in people)
    else:
        text = f"{t(lang, 'people.title')}\n\n{t(lang, 'people.empty')}"
    for person in people:
        bell = "🔔" if person.notifications_enabled else "🔕"
        kb.button(text=f"✏️ {person.name}", callback_data=f"people:edit:{person.id}")
        kb.button(text=bell, callback_data=f"people:notify:{person.id}")
        kb.button(text="🗑", callback_data=f"people:remove:{person.id}")
        rows.append(3)
    kb.button(text=t(lang, "people.btn_add"), callback_data="people:add")
    rows.append(1)
    kb.adjust(*rows)
    return text, kb.as_markup()


async def show_people(message: Message, tracker: SleepTracker):
    lang = tracker.get_language(message.from_user.id)
    text, markup = build_people_view(lang, tracker.list_people(message.from_user.id))
    await message.answer(text, reply_markup=markup)


async def _edit_people(call: CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    text, markup = build_people_view(lang, tracker.list_people(call.from_user.id))
    await call.message.edit_text(text, reply_markup=markup)


@router.message(Command("people"))
async def cmd_people(message: Message, state: FSMContext, tracker: SleepTracker):
    await state.clear()
    await show_people(message, tracker)


@router.callback_query(F.data == "people:list")
async def people_list(call: CallbackQuery, tracker: SleepTracker):
    await _edit_people(call, tracker)
    await call.answer()


# Add / edit form: name -> age -> notes

@router.callback_query(F.data == "people:add")
async def people_add(call: CallbackQuery, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    await state.clear()
    await state.set_state(PersonStates.name)
    await call.message.answer(t(lang, "people.ask_name"))
    await call.answer()


@router.callback_query(F.data.startswith("people:edit:"))
async def people_edit(call: CallbackQuery, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    person_id = call.data.split(":", 2)[2]
    person = tracker.get_person(call.from_user.id, person_id)
    if person is None:
        await call.answer(t(lang, "people.not_found"), show_alert=True)
        return
    await state.clear()
    await state.update_data(person_id=person.id)
    await state.set_state(PersonStates.name)
    await call.message.answer(t(lang, "people.ask_name_edit", name=html.quote(person.name)))
    await call.answer()


@router.message(PersonStates.name)
async def people_name(message: Message, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(message.from_user.id)
    name = (message.text or "").strip()
    if not name or len(name) > MAX_NAME_LENGTH:
        await message.answer(t(lang, "people.invalid_name", max=MAX_NAME_LENGTH))
        return
    await state.update_data(name=name)
    await state.set_state(PersonStates.age)
    await message.answer(t(lang, "people.ask_age"))


@router.message(PersonStates.age)
async def people_age(message: Message, state: FSMContext, tracker: SleepTracker):
    lang = tracker.get_language(message.from_user.id)
    try:
        age = parse_age(message.text or "")
    except ValueError:
        await message.answer(t(lang, "people.invalid_age"))
        return
    await state.update_data(age=age)
    await state.set_state(PersonStates.notes)
    await message.answer(t(lang, "people.ask_notes"))


@router.message(PersonStates.notes)
async def people_notes(message: Message, state: FSMContext, tracker: SleepTracker):
    user_id = message.from_user.id
    lang = tracker.get_language(user_id)
    notes: Optional[str] = None if is_skip(message.text) else (message.text or "").strip() or None
    data = await state.get_data()
    await state.clear()

    person_id = data.get("person_id")
    if person_id:
        person = tracker.edit_person(user_id, person_id, data["name"], age=data.get("age"), notes=notes)
        if person is None:
            await message.answer(t(lang, "people.not_found"))
            return
        await message.answer(t(lang, "people.updated", name=html.quote(person.name)))
    else:
        person = tracker.add_person(user_id, data["name"], age=data.get("age"), notes=notes)
        await message.answer(t(lang, "people.added", name=html.quote(person.name)))
    await show_people(message, tracker)


@router.callback_query(F.data.startswith("people:notify:"))
async def people_toggle_notifications(call: CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    person_id = call.data.split(":", 2)[2]
    person = tracker.get_person(call.from_user.id, person_id)
    if person is None:
        await call.answer(t(lang, "people.not_found"), show_alert=True)
        return
    person = tracker.set_person_notifications(call.from_user.id, person_id, not person.notifications_enabled)
    if person is None:
        # removed between the lookup and the update
        await call.answer(t(lang, "people.not_found"), show_alert=True)
        return
    await _edit_people(call, tracker)
    key = "people.notifications_on" if person.notifications_enabled else "people.notifications_off"
    await call.answer(t(lang, key, name=person.name))


# Removal asks for confirmation first

@router.callback_query(F.data.startswith("people:remove:"))
async def people_remove(call: CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    person_id = call.data.split(":", 2)[2]
    person = tracker.get_person(call.from_user.id, person_id)
    if person is None:
        await call.answer(t(lang, "people.not_found"), show_alert=True)
        return
    kb = InlineKeyboardBuilder()
    kb.button(text=t(lang, "btn_yes"), callback_data=f"people:remove_yes:{person.id}")
    kb.button(text=t(lang, "btn_no"), callback_data="people:remove_no")
    kb.adjust(2)
    await call.message.edit_text(t(lang, "people.remove_confirm", name=html.quote(person.name)), reply_markup=kb.as_markup())
    await call.answer()


@router.callback_query(F.data.startswith("people:remove_yes:"))
async def people_remove_yes(call: CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    person_id = call.data.split(":", 2)[2]
    removed = tracker.remove_person(call.from_user.id, person_id)
    await _edit_people(call, tracker)
    await call.answer(t(lang, "people.removed" if removed else "people.not_found"))


@router.callback_query(F.data == "people:remove_no")
async def people_remove_no(call: CallbackQuery, tracker: SleepTracker):
    await _edit_people(call, tracker)
    await call.answer()
