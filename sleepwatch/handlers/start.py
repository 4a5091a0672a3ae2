from aiogram import Router, types, F
from aiogram.filters import Command
from aiogram.utils.keyboard import InlineKeyboardBuilder

router = Router()

from sleepwatch.services.i18n import t
from sleepwatch.services.tracker import SleepTracker

LANGUAGE_BUTTONS = {
    "🇺🇸 English": "en",
    "🇷🇺 Русский": "ru",
}


def _language_reply_kb() -> types.ReplyKeyboardMarkup:
    return types.ReplyKeyboardMarkup(
        keyboard=[[types.KeyboardButton(text=label) for label in LANGUAGE_BUTTONS]],
        resize_keyboard=True,
    )


@router.message(Command("start"))
async def cmd_start(message: types.Message, tracker: SleepTracker):
    # Existing caregivers are asked before their data is wiped
    caregiver = tracker.get_caregiver(message.from_user.id)
    if caregiver:
        lang = caregiver.language or "en"
        kb = InlineKeyboardBuilder()
        kb.button(text=t(lang, "btn_yes"), callback_data="start:reset:yes")
        kb.button(text=t(lang, "btn_no"), callback_data="start:reset:no")
        kb.adjust(2)
        await message.answer(f"{t(lang, 'start.reset_title')}\n{t(lang, 'start.reset_desc')}", reply_markup=kb.as_markup())
        return

    await message.answer(t("en", "start.choose_language"), reply_markup=_language_reply_kb())


@router.callback_query(F.data == "start:reset:no")
async def start_reset_no(call: types.CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    from sleepwatch.handlers.menu import build_main_menu_kb
    await call.message.edit_text(t(lang, "menu.welcome"))
    await call.message.answer(t(lang, "menu.hint"), reply_markup=build_main_menu_kb(lang))
    await call.answer()


@router.callback_query(F.data == "start:reset:yes")
async def start_reset_yes(call: types.CallbackQuery, tracker: SleepTracker):
    lang = tracker.get_language(call.from_user.id)
    tracker.reset(call.from_user.id)
    await call.message.edit_text(t(lang, "start.reset_done"))
    await call.message.answer(t(lang, "start.choose_language"), reply_markup=_language_reply_kb())
    await call.answer()


@router.message(F.text.in_(set(LANGUAGE_BUTTONS)))
async def set_language(message: types.Message, tracker: SleepTracker):
    lang = LANGUAGE_BUTTONS[message.text]
    tracker.ensure_caregiver(message.from_user.id, name=message.from_user.full_name, language=lang)

    from sleepwatch.handlers.menu import build_main_menu_kb
    await message.answer(t(lang, "start.lang_chosen"), reply_markup=types.ReplyKeyboardRemove())
    await message.answer(t(lang, "start.intro"), reply_markup=build_main_menu_kb(lang))
