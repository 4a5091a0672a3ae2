from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

from aiogram.exceptions import TelegramBadRequest, TelegramNetworkError
from aiogram.methods import EditMessageText, SendMessage

from sleepwatch.models.notification_log import NotificationLog
from sleepwatch.services.checkup_scheduler import Notification, NotificationKind
from sleepwatch.services.notifier import TelegramNotifier

SOUND = "https://example.invalid/beep.mp3"


def make_bot():
    bot = AsyncMock()
    counter = iter(range(100, 200))
    bot.send_message.side_effect = lambda *args, **kwargs: SimpleNamespace(message_id=next(counter))
    return bot


def due(session_id="s1") -> Notification:
    return Notification(
        kind=NotificationKind.DUE,
        chat_id=7,
        session_id=session_id,
        title="Check-up due",
        body="Time to check on <Mia>.",
    )


def overdue(session_id="s1") -> Notification:
    return Notification(
        kind=NotificationKind.OVERDUE,
        chat_id=7,
        session_id=session_id,
        title="Check-up overdue",
        body="Mia has not been checked.",
        renotify=True,
    )


def test_first_alert_is_sent_and_logged(session_factory) -> None:
    bot = make_bot()
    notifier = TelegramNotifier(bot, sound_url=SOUND, session_factory=session_factory)

    assert asyncio.run(notifier.deliver(due())) is True

    bot.send_message.assert_awaited_once()
    args, kwargs = bot.send_message.call_args
    assert args[0] == 7
    assert "&lt;Mia&gt;" in args[1]
    assert kwargs["reply_markup"].inline_keyboard[0][0].callback_data == "track:checkup:s1"
    bot.send_audio.assert_not_awaited()
    with session_factory() as db:
        logged = db.query(NotificationLog).one()
    assert (logged.user_id, logged.notification_type, logged.session_id) == (7, "checkup_due", "s1")


def test_plain_alert_edits_previous_message(session_factory) -> None:
    bot = make_bot()
    notifier = TelegramNotifier(bot, sound_url=SOUND, session_factory=session_factory)

    async def scenario():
        await notifier.deliver(due())
        await notifier.deliver(due())

    asyncio.run(scenario())

    assert bot.send_message.await_count == 1
    bot.edit_message_text.assert_awaited_once()
    assert bot.edit_message_text.call_args.kwargs["message_id"] == 100


def test_failed_edit_falls_back_to_new_message(session_factory) -> None:
    bot = make_bot()
    bot.edit_message_text.side_effect = TelegramBadRequest(
        method=EditMessageText(text="x", chat_id=7, message_id=100),
        message="message to edit not found",
    )
    notifier = TelegramNotifier(bot, sound_url=SOUND, session_factory=session_factory)

    async def scenario():
        await notifier.deliver(due())
        await notifier.deliver(due())

    asyncio.run(scenario())

    assert bot.send_message.await_count == 2


def test_renotify_replaces_message_and_plays_sound(session_factory) -> None:
    bot = make_bot()
    notifier = TelegramNotifier(bot, sound_url=SOUND, session_factory=session_factory)

    async def scenario():
        await notifier.deliver(due())
        await notifier.deliver(overdue())

    asyncio.run(scenario())

    bot.delete_message.assert_awaited_once_with(chat_id=7, message_id=100)
    assert bot.send_message.await_count == 2
    bot.send_audio.assert_awaited_once_with(7, audio=SOUND)


def test_sound_failure_is_only_logged(session_factory) -> None:
    bot = make_bot()
    bot.send_audio.side_effect = RuntimeError("no audio")
    notifier = TelegramNotifier(bot, sound_url=SOUND, session_factory=session_factory)

    assert asyncio.run(notifier.deliver(overdue())) is True


def test_send_failure_returns_false(session_factory) -> None:
    bot = make_bot()
    bot.send_message.side_effect = TelegramNetworkError(
        method=SendMessage(chat_id=7, text="x"),
        message="timeout",
    )
    notifier = TelegramNotifier(bot, sound_url=SOUND, session_factory=session_factory)

    assert asyncio.run(notifier.deliver(due())) is False
    with session_factory() as db:
        assert db.query(NotificationLog).count() == 0


def test_forget_starts_a_new_thread_of_alerts(session_factory) -> None:
    bot = make_bot()
    notifier = TelegramNotifier(bot, sound_url=SOUND, session_factory=session_factory)

    async def scenario():
        await notifier.deliver(due())
        notifier.forget("s1")
        await notifier.deliver(due())

    asyncio.run(scenario())

    assert bot.send_message.await_count == 2
    bot.edit_message_text.assert_not_awaited()


def test_call_schedules_delivery_on_running_loop(session_factory) -> None:
    bot = make_bot()
    notifier = TelegramNotifier(bot, sound_url=SOUND, session_factory=session_factory)

    async def scenario():
        notifier(due())
        for _ in range(5):
            await asyncio.sleep(0)

    asyncio.run(scenario())

    bot.send_message.assert_awaited_once()
