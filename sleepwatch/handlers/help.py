from __future__ import annotations

from aiogram import types
from aiogram.filters import Command

from sleepwatch.services.i18n import t
from sleepwatch.services.tracker import SleepTracker
from .start import router


def help_text(lang: str) -> str:
    return f"{t(lang, 'help.title')}\n\n{t(lang, 'help.body')}\n\n{t(lang, 'help.commands')}"


async def show_help(message: types.Message, tracker: SleepTracker):
    """Show how check-ups and alarms work."""
    lang = tracker.get_language(message.from_user.id)
    await message.answer(help_text(lang))


@router.message(Command("help"))
async def cmd_help(message: types.Message, tracker: SleepTracker):
    await show_help(message, tracker)
