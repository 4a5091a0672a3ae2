"""Delivers check-up reminders as Telegram messages.

Alerts for one session share a tag (the session id) so the chat shows a
single live alert per session: a plain reminder edits the previous alert in
place, a re-notifying one replaces it with a fresh message so the phone
rings again.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Set

from aiogram import Bot, html
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder
from sqlalchemy.exc import SQLAlchemyError

from sleepwatch.config import ALERT_SOUND_URL
from sleepwatch.database import SessionLocal
from sleepwatch.models.notification_log import NotificationLog
from sleepwatch.services.checkup_scheduler import Notification, NotificationKind
from sleepwatch.services.i18n import t

logger = logging.getLogger(__name__)


def log_notification(user_id: int, notification_type: str, session_id: Optional[str] = None, session_factory=SessionLocal) -> None:
    """Log notification to database."""
    try:
        with session_factory() as session:
            session.add(
                NotificationLog(
                    user_id=user_id,
                    notification_type=notification_type,
                    session_id=session_id,
                )
            )
            session.commit()
    except SQLAlchemyError as e:
        logger.error("Failed to log notification: %s", e)


def _checkup_kb(notification: Notification) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text=t(notification.language, "tracker.btn_checkup_now"), callback_data=f"track:checkup:{notification.session_id}")
    kb.adjust(1)
    return kb.as_markup()


class TelegramNotifier:
    def __init__(self, bot: Bot, sound_url: Optional[str] = ALERT_SOUND_URL, session_factory=SessionLocal) -> None:
        self._bot = bot
        self._sound_url = sound_url
        self._session_factory = session_factory
        self._messages: Dict[str, int] = {}  # tag -> message id of the live alert
        self._tasks: Set[asyncio.Task] = set()

    def __call__(self, notification: Notification) -> None:
        """Queue delivery on the running loop and return immediately."""
        task = asyncio.get_running_loop().create_task(self.deliver(notification))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def forget(self, tag: str) -> None:
        self._messages.pop(tag, None)

    async def deliver(self, notification: Notification) -> bool:
        text = f"{html.bold(html.quote(notification.title))}\n{html.quote(notification.body)}"
        try:
            message_id = await self._show(notification, text, _checkup_kb(notification))
        except TelegramAPIError as e:
            logger.error("Failed to send %s to chat=%s: %s", notification.kind.value, notification.chat_id, e)
            return False

        self._messages[notification.tag] = message_id
        logger.info("Sent %s for session %s to chat=%s", notification.kind.value, notification.session_id, notification.chat_id)
        log_notification(notification.chat_id, notification.kind.value, notification.session_id, self._session_factory)

        if notification.kind is NotificationKind.OVERDUE:
            await self._play_alert(notification.chat_id)
        return True

    async def _show(self, notification: Notification, text: str, markup: InlineKeyboardMarkup) -> int:
        previous = self._messages.get(notification.tag)
        if previous is not None:
            if not notification.renotify:
                try:
                    await self._bot.edit_message_text(
                        text=text,
                        chat_id=notification.chat_id,
                        message_id=previous,
                        reply_markup=markup,
                    )
                    return previous
                except TelegramBadRequest as e:
                    logger.debug("Could not edit alert %s, sending a new one: %s", previous, e)
            else:
                await self._drop(notification.chat_id, previous)
        message = await self._bot.send_message(notification.chat_id, text, reply_markup=markup)
        return message.message_id

    async def _drop(self, chat_id: int, message_id: int) -> None:
        try:
            await self._bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramAPIError as e:
            logger.debug("Could not delete alert %s: %s", message_id, e)

    async def _play_alert(self, chat_id: int) -> None:
        if not self._sound_url:
            return
        try:
            await self._bot.send_audio(chat_id, audio=self._sound_url)
        except Exception as e:
            logger.error("Failed to play alert sound for chat=%s: %s", chat_id, e)
