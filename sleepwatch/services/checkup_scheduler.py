"""Check-up reminders for active sleep sessions.

Every active session owns at most one scheduled job. A fresh session, or one
that just had a check-up, is *pending*: one job fires after the caregiver's
check-up interval and announces that a check-up is due. From then on the
session is *overdue* and a job re-arms every alarm interval until a check-up,
the end of the session or the removal of the person cancels it.

Jobs live only in memory. Restarting the process drops every pending alarm.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from functools import partial
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from sleepwatch.config import DEFAULT_ALARM_INTERVAL_MIN, DEFAULT_CHECKUP_INTERVAL_MIN, MAX_INTERVAL_MIN
from sleepwatch.database import utcnow
from sleepwatch.services.i18n import t

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class ReminderState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    OVERDUE = "overdue"


class NotificationKind(str, Enum):
    DUE = "checkup_due"
    OVERDUE = "checkup_overdue"


@dataclass(frozen=True)
class ReminderSettings:
    checkup_interval_min: int = DEFAULT_CHECKUP_INTERVAL_MIN
    alarm_interval_min: int = DEFAULT_ALARM_INTERVAL_MIN
    notifications_enabled: bool = True
    language: str = "en"

    def __post_init__(self) -> None:
        for name in ("checkup_interval_min", "alarm_interval_min"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or not (0 < value <= MAX_INTERVAL_MIN):
                raise ValueError(f"{name} must be between 1 and {MAX_INTERVAL_MIN} minutes, got {value!r}")

    @property
    def checkup_interval(self) -> timedelta:
        return timedelta(minutes=self.checkup_interval_min)

    @property
    def alarm_interval(self) -> timedelta:
        return timedelta(minutes=self.alarm_interval_min)


@dataclass(frozen=True)
class Notification:
    """A reminder for the caregiver; ``tag`` groups alerts of one session."""

    kind: NotificationKind
    chat_id: int
    session_id: str
    title: str
    body: str
    renotify: bool = False
    language: str = "en"

    @property
    def tag(self) -> str:
        return self.session_id


@dataclass
class SleepSession:
    id: str
    owner_id: int
    person_id: str
    person_name: str
    started_at: datetime
    checkups: List[datetime] = field(default_factory=list)
    status: SessionStatus = SessionStatus.ACTIVE
    state: ReminderState = ReminderState.IDLE
    timer_id: Optional[str] = None
    ended_at: Optional[datetime] = None
    notes: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    @property
    def last_event_at(self) -> datetime:
        """Time of the last check-up, or the session start if there was none."""
        return self.checkups[-1] if self.checkups else self.started_at

    def due_in(self, interval: timedelta, now: datetime) -> timedelta:
        """Time left until the next check-up is due; negative once overdue."""
        return self.last_event_at + interval - now


def new_session_id() -> str:
    return uuid4().hex[:12]


class CheckupScheduler:
    """Owns the active sessions and their reminder jobs.

    ``timers`` is the delayed-task source: anything with
    ``schedule(key, delay, callback)``, ``cancel(key)`` and ``pending()``.
    ``settings_for(session)`` returns the current :class:`ReminderSettings`
    and ``notify(notification)`` delivers a reminder, fire-and-forget.
    """

    def __init__(
        self,
        timers,
        settings_for: Callable[[SleepSession], ReminderSettings],
        notify: Callable[[Notification], None],
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._timers = timers
        self._settings_for = settings_for
        self._notify = notify
        self._clock = clock
        self._sessions: Dict[str, SleepSession] = {}
        self._seq = itertools.count(1)
        self._last_settings: Dict[str, ReminderSettings] = {}

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def start_session(self, owner_id: int, person_id: str, person_name: str) -> Optional[SleepSession]:
        if self.active_for_person(person_id) is not None:
            logger.info("Person %s already has an active session", person_id)
            return None
        session = SleepSession(
            id=new_session_id(),
            owner_id=owner_id,
            person_id=person_id,
            person_name=person_name,
            started_at=self._clock(),
        )
        settings = self._settings_for(session)
        # arm first so a failing timer source leaves nothing registered
        self._arm_pending(session, settings.checkup_interval)
        self._sessions[session.id] = session
        self._last_settings[session.id] = settings
        logger.info("Started session %s for person=%s owner=%s", session.id, person_id, owner_id)
        return session

    def checkup(self, session_id: str) -> Optional[SleepSession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        settings = self._settings_for(session)
        self._cancel(session)
        session.checkups.append(self._clock())
        self._arm_pending(session, settings.checkup_interval)
        self._last_settings[session.id] = settings
        logger.info("Check-up #%d logged for session %s", len(session.checkups), session_id)
        return session

    def end_session(self, session_id: str, notes: Optional[str] = None) -> Optional[SleepSession]:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        self._last_settings.pop(session_id, None)
        self._cancel(session)
        session.status = SessionStatus.COMPLETED
        session.state = ReminderState.IDLE
        session.ended_at = self._clock()
        session.notes = notes
        logger.info("Ended session %s", session_id)
        return session

    def remove_person(self, person_id: str) -> List[SleepSession]:
        removed = [s for s in list(self._sessions.values()) if s.person_id == person_id]
        for session in removed:
            self.end_session(session.id)
        return removed

    def shutdown(self) -> None:
        for session in self._sessions.values():
            self._cancel(session)
        self._sessions.clear()
        self._last_settings.clear()
        logger.info("Check-up scheduler shut down")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get(self, session_id: str) -> Optional[SleepSession]:
        return self._sessions.get(session_id)

    def active(self, owner_id: Optional[int] = None) -> List[SleepSession]:
        sessions = [s for s in self._sessions.values() if owner_id is None or s.owner_id == owner_id]
        return sorted(sessions, key=lambda s: s.started_at)

    def active_for_person(self, person_id: str) -> Optional[SleepSession]:
        for session in self._sessions.values():
            if session.person_id == person_id:
                return session
        return None

    # ------------------------------------------------------------------
    # Timer plumbing
    # ------------------------------------------------------------------
    def _arm(self, session: SleepSession, delay: timedelta, callback, state: ReminderState) -> None:
        self._cancel(session)
        timer_id = f"checkup:{session.id}:{next(self._seq)}"
        self._timers.schedule(timer_id, delay, partial(callback, session.id, timer_id))
        session.timer_id = timer_id
        session.state = state

    def _arm_pending(self, session: SleepSession, delay: timedelta) -> None:
        self._arm(session, delay, self._on_checkup_due, ReminderState.PENDING)

    def _arm_overdue(self, session: SleepSession, delay: timedelta) -> None:
        self._arm(session, delay, self._on_overdue, ReminderState.OVERDUE)

    def _cancel(self, session: SleepSession) -> None:
        if session.timer_id is not None:
            self._timers.cancel(session.timer_id)
            session.timer_id = None

    def _claim(self, session_id: str, timer_id: str) -> Optional[SleepSession]:
        """Return the session a fired job belongs to, or None if the job is stale."""
        session = self._sessions.get(session_id)
        if session is None or not session.is_active:
            return None
        if session.timer_id != timer_id:
            logger.debug("Ignoring stale timer %s (current %s)", timer_id, session.timer_id)
            return None
        # the job has run; nothing is outstanding until we re-arm
        session.timer_id = None
        return session

    def _on_checkup_due(self, session_id: str, timer_id: str) -> None:
        session = self._claim(session_id, timer_id)
        if session is None:
            return
        settings = self._current_settings(session)
        if settings.notifications_enabled:
            self._emit(session, settings, NotificationKind.DUE)
        self._arm_overdue(session, settings.alarm_interval)

    def _on_overdue(self, session_id: str, timer_id: str) -> None:
        session = self._claim(session_id, timer_id)
        if session is None:
            return
        settings = self._current_settings(session)
        elapsed = self._clock() - session.last_event_at
        if elapsed < settings.checkup_interval:
            self._arm_pending(session, settings.checkup_interval - elapsed)
            return
        if settings.notifications_enabled:
            self._emit(session, settings, NotificationKind.OVERDUE)
        self._arm_overdue(session, settings.alarm_interval)

    def _current_settings(self, session: SleepSession) -> ReminderSettings:
        """Settings for a fired job; falls back to the last good ones if the lookup fails."""
        try:
            settings = self._settings_for(session)
        except Exception as exc:
            logger.error("Could not load reminder settings for session %s: %s", session.id, exc)
            return self._last_settings.get(session.id) or ReminderSettings()
        self._last_settings[session.id] = settings
        return settings

    def _emit(self, session: SleepSession, settings: ReminderSettings, kind: NotificationKind) -> None:
        lang = settings.language
        if kind is NotificationKind.DUE:
            notification = Notification(
                kind=kind,
                chat_id=session.owner_id,
                session_id=session.id,
                title=t(lang, "notif.due.title"),
                body=t(lang, "notif.due.body", name=session.person_name),
                language=lang,
            )
        else:
            notification = Notification(
                kind=kind,
                chat_id=session.owner_id,
                session_id=session.id,
                title=t(lang, "notif.overdue.title"),
                body=t(lang, "notif.overdue.body", name=session.person_name, minutes=settings.alarm_interval_min),
                renotify=True,
                language=lang,
            )
        try:
            self._notify(notification)
        except Exception as exc:
            logger.error("Failed to deliver %s for session %s: %s", kind.value, session.id, exc)
