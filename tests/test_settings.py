from __future__ import annotations

import pytest

from sleepwatch.config import MAX_INTERVAL_MIN
from sleepwatch.services.settings import build_settings_menu_kb, is_skip, parse_age, parse_minutes


@pytest.mark.parametrize("text, expected", [("10", 10), (" 3 ", 3), ("0", None), ("-2", None), ("ten", None), ("", None), (None, None)])
def test_parse_minutes(text, expected) -> None:
    assert parse_minutes(text) == expected


def test_parse_minutes_caps_at_one_week() -> None:
    assert parse_minutes(str(MAX_INTERVAL_MIN)) == MAX_INTERVAL_MIN
    assert parse_minutes(str(MAX_INTERVAL_MIN + 1)) is None
    assert parse_minutes("10000000000") is None


def test_parse_age() -> None:
    assert parse_age("7") == 7
    assert parse_age("-") is None
    assert parse_age("Skip") is None
    with pytest.raises(ValueError):
        parse_age("200")
    with pytest.raises(ValueError):
        parse_age("seven")


def test_is_skip() -> None:
    assert is_skip(" - ")
    assert not is_skip("notes")


def test_settings_menu_toggle_label_follows_state() -> None:
    on = build_settings_menu_kb("en", True).as_markup()
    off = build_settings_menu_kb("en", False).as_markup()

    assert on.inline_keyboard[0][0].text == "🔕 Turn reminders off"
    assert off.inline_keyboard[0][0].text == "🔔 Turn reminders on"
    assert [row[0].callback_data for row in on.inline_keyboard] == [
        "settings:notifications",
        "settings:checkup",
        "settings:alarm",
        "settings:lang",
    ]
