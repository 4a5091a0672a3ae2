from __future__ import annotations

from typing import Optional

from aiogram.utils.keyboard import InlineKeyboardBuilder

from sleepwatch.config import MAX_INTERVAL_MIN
from sleepwatch.services.i18n import t

SKIP_TOKENS = {"-", "—", "skip"}


def build_settings_menu_kb(lang: str, notifications_enabled: bool) -> InlineKeyboardBuilder:
    kb = InlineKeyboardBuilder()
    toggle_key = "settings.btn_notifications_off" if notifications_enabled else "settings.btn_notifications_on"
    kb.button(text=t(lang, toggle_key), callback_data="settings:notifications")
    kb.button(text=t(lang, "settings.btn_checkup_interval"), callback_data="settings:checkup")
    kb.button(text=t(lang, "settings.btn_alarm_interval"), callback_data="settings:alarm")
    kb.button(text=t(lang, "btn_change_language"), callback_data="settings:lang")
    kb.adjust(1)
    return kb


def build_language_kb(lang: str) -> InlineKeyboardBuilder:
    kb = InlineKeyboardBuilder()
    kb.button(text="🇺🇸 English", callback_data="lang:en")
    kb.button(text="🇷🇺 Русский", callback_data="lang:ru")
    kb.adjust(1)
    return kb


def parse_minutes(text: str) -> Optional[int]:
    """Parse a whole number of minutes up to MAX_INTERVAL_MIN, or None if invalid."""
    try:
        value = int((text or "").strip())
    except ValueError:
        return None
    if not (0 < value <= MAX_INTERVAL_MIN):
        return None
    return value


def is_skip(text: Optional[str]) -> bool:
    return (text or "").strip().lower() in SKIP_TOKENS


def parse_age(text: str) -> Optional[int]:
    """Parse an age for the person form.

    Returns None when the caregiver skipped the field and raises ValueError
    for anything that is not a plausible age.
    """
    if is_skip(text):
        return None
    age = int(text.strip())
    if not (0 < age < 130):
        raise ValueError(f"Invalid age: {age}")
    return age
