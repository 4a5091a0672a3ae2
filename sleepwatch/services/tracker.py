"""Caregiver-facing operations: people, sleep sessions and the sleep log.

The tracker is built once at startup and handed to the bot handlers. It owns
the :class:`CheckupScheduler` and writes a :class:`SleepLog` row for every
session lifecycle event. Ids that are unknown or belong to another caregiver
turn an operation into a no-op.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from sleepwatch.database import SessionLocal, utcnow
from sleepwatch.models.caregiver import Caregiver
from sleepwatch.models.notification_log import NotificationLog
from sleepwatch.models.person import Person
from sleepwatch.models.sleep_log import SleepAction, SleepLog
from sleepwatch.services.checkup_scheduler import (
    CheckupScheduler,
    Notification,
    ReminderSettings,
    SleepSession,
)
from sleepwatch.services.history import filter_logs

logger = logging.getLogger(__name__)


def collect_stats(session_factory=SessionLocal) -> Dict[str, int]:
    """Row counts used by the web companion."""
    with session_factory() as session:
        return {
            "caregivers": session.query(Caregiver).count(),
            "people": session.query(Person).count(),
            "logs": session.query(SleepLog).count(),
            "notifications": session.query(NotificationLog).count(),
        }


class SleepTracker:
    def __init__(
        self,
        timers,
        notify: Callable[[Notification], None],
        session_factory=SessionLocal,
        clock: Callable[[], datetime] = utcnow,
        on_session_end: Optional[Callable[[SleepSession], None]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._on_session_end = on_session_end
        self.scheduler = CheckupScheduler(timers, self.settings_for, notify, clock=clock)

    # ------------------------------------------------------------------
    # Caregivers and settings
    # ------------------------------------------------------------------
    def get_caregiver(self, tg_id: int) -> Optional[Caregiver]:
        with self._session_factory() as session:
            return session.query(Caregiver).filter(Caregiver.tg_id == tg_id).first()

    def ensure_caregiver(self, tg_id: int, name: Optional[str] = None, language: Optional[str] = None) -> Caregiver:
        with self._session_factory() as session:
            caregiver = self._caregiver(session, tg_id)
            if name:
                caregiver.name = name
            if language:
                caregiver.language = language
            session.commit()
            return caregiver

    def get_language(self, tg_id: int) -> str:
        caregiver = self.get_caregiver(tg_id)
        return (caregiver.language or "en") if caregiver else "en"

    def reminder_settings(self, owner_id: int, person_id: Optional[str] = None) -> ReminderSettings:
        with self._session_factory() as session:
            caregiver = session.query(Caregiver).filter(Caregiver.tg_id == owner_id).first()
            if caregiver is None:
                return ReminderSettings(notifications_enabled=False)
            enabled = caregiver.notifications_enabled
            if enabled and person_id is not None:
                person = session.get(Person, person_id)
                enabled = person is not None and person.notifications_enabled
            return ReminderSettings(
                checkup_interval_min=caregiver.checkup_interval_min,
                alarm_interval_min=caregiver.alarm_interval_min,
                notifications_enabled=enabled,
                language=caregiver.language or "en",
            )

    def settings_for(self, sleep_session: SleepSession) -> ReminderSettings:
        return self.reminder_settings(sleep_session.owner_id, sleep_session.person_id)

    def set_checkup_interval(self, owner_id: int, minutes: int) -> int:
        with self._session_factory() as session:
            caregiver = self._caregiver(session, owner_id)
            caregiver.checkup_interval_min = minutes
            session.commit()
        logger.info("Check-up interval for owner=%s set to %s min", owner_id, minutes)
        return minutes

    def set_alarm_interval(self, owner_id: int, minutes: int) -> int:
        with self._session_factory() as session:
            caregiver = self._caregiver(session, owner_id)
            caregiver.alarm_interval_min = minutes
            session.commit()
        logger.info("Alarm interval for owner=%s set to %s min", owner_id, minutes)
        return minutes

    def toggle_notifications(self, owner_id: int) -> bool:
        with self._session_factory() as session:
            caregiver = self._caregiver(session, owner_id)
            caregiver.notifications_enabled = not caregiver.notifications_enabled
            session.commit()
            return caregiver.notifications_enabled

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------
    def list_people(self, owner_id: int) -> List[Person]:
        with self._session_factory() as session:
            return (
                session.query(Person)
                .filter(Person.owner_id == owner_id)
                .order_by(Person.created_at, Person.name)
                .all()
            )

    def get_person(self, owner_id: int, person_id: str) -> Optional[Person]:
        with self._session_factory() as session:
            return self._owned_person(session, owner_id, person_id)

    def add_person(self, owner_id: int, name: str, age: Optional[int] = None, notes: Optional[str] = None) -> Person:
        with self._session_factory() as session:
            person = Person(owner_id=owner_id, name=name, age=age, notes=notes, notifications_enabled=True)
            session.add(person)
            session.commit()
        logger.info("Added person %s for owner=%s", person.id, owner_id)
        return person

    def edit_person(
        self,
        owner_id: int,
        person_id: str,
        name: str,
        age: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Optional[Person]:
        with self._session_factory() as session:
            person = self._owned_person(session, owner_id, person_id)
            if person is None:
                return None
            person.name = name
            person.age = age
            person.notes = notes
            session.commit()
        active = self.scheduler.active_for_person(person_id)
        if active is not None:
            active.person_name = person.name
        return person

    def set_person_notifications(self, owner_id: int, person_id: str, enabled: bool) -> Optional[Person]:
        with self._session_factory() as session:
            person = self._owned_person(session, owner_id, person_id)
            if person is None:
                return None
            person.notifications_enabled = enabled
            session.commit()
            return person

    def remove_person(self, owner_id: int, person_id: str) -> bool:
        with self._session_factory() as session:
            person = self._owned_person(session, owner_id, person_id)
            if person is None:
                return False
            session.delete(person)
            session.commit()
        for sleep_session in self.scheduler.remove_person(person_id):
            self._session_ended(sleep_session)
        logger.info("Removed person %s for owner=%s", person_id, owner_id)
        return True

    # ------------------------------------------------------------------
    # Sleep sessions
    # ------------------------------------------------------------------
    def active_sessions(self, owner_id: int) -> List[SleepSession]:
        return self.scheduler.active(owner_id)

    def start_sleep(self, owner_id: int, person_id: str) -> Optional[SleepSession]:
        person = self.get_person(owner_id, person_id)
        if person is None:
            return None
        sleep_session = self.scheduler.start_session(owner_id, person.id, person.name)
        if sleep_session is None:
            return None
        self._append_log(sleep_session, SleepAction.START, sleep_session.started_at)
        return sleep_session

    def log_checkup(self, owner_id: int, session_id: str) -> Optional[SleepSession]:
        if self.get_session(owner_id, session_id) is None:
            return None
        sleep_session = self.scheduler.checkup(session_id)
        self._append_log(sleep_session, SleepAction.CHECKUP, sleep_session.checkups[-1])
        return sleep_session

    def end_sleep(self, owner_id: int, session_id: str, notes: Optional[str] = None) -> Optional[SleepSession]:
        if self.get_session(owner_id, session_id) is None:
            return None
        notes = (notes or "").strip() or None
        sleep_session = self.scheduler.end_session(session_id, notes=notes)
        self._append_log(sleep_session, SleepAction.END, sleep_session.ended_at, notes=notes)
        self._session_ended(sleep_session)
        return sleep_session

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def history(self, owner_id: int, person_id: Optional[str] = None, day: Optional[date] = None, tz=None) -> List[SleepLog]:
        with self._session_factory() as session:
            logs = session.query(SleepLog).filter(SleepLog.owner_id == owner_id).all()
        return filter_logs(logs, person_id=person_id, day=day, tz=tz)

    def reset(self, owner_id: int) -> None:
        """Wipe everything stored for a caregiver and stop their sessions."""
        for sleep_session in self.scheduler.active(owner_id):
            self.scheduler.end_session(sleep_session.id)
            self._session_ended(sleep_session)
        with self._session_factory() as session:
            session.query(SleepLog).filter(SleepLog.owner_id == owner_id).delete()
            session.query(Person).filter(Person.owner_id == owner_id).delete()
            session.query(NotificationLog).filter(NotificationLog.user_id == owner_id).delete()
            session.query(Caregiver).filter(Caregiver.tg_id == owner_id).delete()
            session.commit()
        logger.info("Reset all data for owner=%s", owner_id)

    def stats(self) -> Dict[str, int]:
        stats = collect_stats(self._session_factory)
        stats["active_sessions"] = len(self.scheduler.active())
        return stats

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _caregiver(session, tg_id: int) -> Caregiver:
        caregiver = session.query(Caregiver).filter(Caregiver.tg_id == tg_id).first()
        if caregiver is None:
            caregiver = Caregiver(tg_id=tg_id, language="en")
            session.add(caregiver)
        return caregiver

    @staticmethod
    def _owned_person(session, owner_id: int, person_id: str) -> Optional[Person]:
        person = session.get(Person, person_id)
        if person is None or person.owner_id != owner_id:
            return None
        return person

    def get_session(self, owner_id: int, session_id: str) -> Optional[SleepSession]:
        sleep_session = self.scheduler.get(session_id)
        if sleep_session is None or sleep_session.owner_id != owner_id:
            return None
        return sleep_session

    def _append_log(self, sleep_session: SleepSession, action: SleepAction, timestamp: datetime, notes: Optional[str] = None) -> None:
        with self._session_factory() as session:
            session.add(
                SleepLog(
                    owner_id=sleep_session.owner_id,
                    person_id=sleep_session.person_id,
                    person_name=sleep_session.person_name,
                    action=action,
                    timestamp=timestamp,
                    session_id=sleep_session.id,
                    notes=notes,
                )
            )
            session.commit()

    def _session_ended(self, sleep_session: SleepSession) -> None:
        if self._on_session_end is not None:
            self._on_session_end(sleep_session)
