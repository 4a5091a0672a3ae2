from __future__ import annotations

import logging
from typing import Callable, Optional

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from sleepwatch.config import ALERT_SOUND_URL
from sleepwatch.database import Base, SessionLocal, engine
from sleepwatch.handlers import start  # shared router; importing the package registers every handler
from sleepwatch.models import caregiver, notification_log, person, sleep_log  # register models
from sleepwatch.scheduler import APSchedulerTimers, build_scheduler
from sleepwatch.services.notifier import TelegramNotifier
from sleepwatch.services.tracker import SleepTracker

logger = logging.getLogger(__name__)


def build_dispatcher(tracker: SleepTracker) -> Dispatcher:
    """Dispatcher whose handlers receive ``tracker`` as a keyword argument."""
    dp = Dispatcher(tracker=tracker)
    dp.include_router(start.router)
    return dp


async def run_bot(token: str, on_ready: Optional[Callable[[SleepTracker], None]] = None) -> None:
    # Create tables if they don't exist yet
    Base.metadata.create_all(bind=engine)

    bot = Bot(
        token=token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    timers = APSchedulerTimers(build_scheduler())
    notifier = TelegramNotifier(bot, sound_url=ALERT_SOUND_URL, session_factory=SessionLocal)
    tracker = SleepTracker(
        timers,
        notifier,
        session_factory=SessionLocal,
        on_session_end=lambda s: notifier.forget(s.id),
    )
    dp = build_dispatcher(tracker)

    timers.start()
    if on_ready is not None:
        on_ready(tracker)
    logger.info("Bot started")
    try:
        await dp.start_polling(bot)
    finally:
        tracker.scheduler.shutdown()
        timers.shutdown()
        await bot.session.close()
        logger.info("Bot stopped")
