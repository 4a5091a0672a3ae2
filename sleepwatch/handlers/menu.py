from __future__ import annotations

from aiogram import F, types
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext

from sleepwatch.services.i18n import t, T
from sleepwatch.services.tracker import SleepTracker
from .start import router


def build_main_menu_kb(lang: str) -> types.ReplyKeyboardMarkup:
    """Build the persistent main menu reply keyboard."""
    return types.ReplyKeyboardMarkup(
        keyboard=[
            [
                types.KeyboardButton(text=t(lang, "menu.tracker")),
                types.KeyboardButton(text=t(lang, "menu.people")),
            ],
            [
                types.KeyboardButton(text=t(lang, "menu.archive")),
                types.KeyboardButton(text=t(lang, "menu.settings")),
            ],
            [
                types.KeyboardButton(text=t(lang, "menu.help")),
            ],
        ],
        resize_keyboard=True,
        is_persistent=True,
    )


@router.message(Command("menu"))
async def show_main_menu(message: types.Message, tracker: SleepTracker):
    """Show the main menu with persistent reply keyboard."""
    lang = tracker.get_language(message.from_user.id)
    await message.answer(t(lang, "menu.welcome"), reply_markup=build_main_menu_kb(lang))


# Button handlers for main menu
TRACKER_BTNS = {T[x]["menu.tracker"] for x in T.keys()}
PEOPLE_BTNS = {T[x]["menu.people"] for x in T.keys()}
ARCHIVE_BTNS = {T[x]["menu.archive"] for x in T.keys()}
SETTINGS_BTNS = {T[x]["menu.settings"] for x in T.keys()}
HELP_BTNS = {T[x]["menu.help"] for x in T.keys()}


@router.message(F.text.in_(TRACKER_BTNS))
async def handle_tracker(message: types.Message, state: FSMContext, tracker: SleepTracker):
    from .tracker import show_tracker
    await state.clear()
    await show_tracker(message, tracker)


@router.message(F.text.in_(PEOPLE_BTNS))
async def handle_people(message: types.Message, state: FSMContext, tracker: SleepTracker):
    from .people import show_people
    await state.clear()
    await show_people(message, tracker)


@router.message(F.text.in_(ARCHIVE_BTNS))
async def handle_archive(message: types.Message, state: FSMContext, tracker: SleepTracker):
    from .archive import show_archive
    await state.clear()
    await show_archive(message, tracker)


@router.message(F.text.in_(SETTINGS_BTNS))
async def handle_settings(message: types.Message, state: FSMContext, tracker: SleepTracker):
    from .settings import show_settings
    await state.clear()
    await show_settings(message, tracker)


@router.message(F.text.in_(HELP_BTNS))
async def handle_help(message: types.Message, tracker: SleepTracker):
    from .help import show_help
    await show_help(message, tracker)
