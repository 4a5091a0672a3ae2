from __future__ import annotations

from datetime import datetime, timezone

import pytest

from sleepwatch.config import MAX_INTERVAL_MIN
from sleepwatch.models.caregiver import Caregiver
from sleepwatch.models.person import Person
from sleepwatch.models.sleep_log import SleepAction, SleepLog


def test_person_name_is_trimmed_and_bounded() -> None:
    assert Person(owner_id=1, name="  Mia  ").name == "Mia"
    with pytest.raises(ValueError):
        Person(owner_id=1, name="")
    with pytest.raises(ValueError):
        Person(owner_id=1, name="x" * 101)


@pytest.mark.parametrize("age", [0, 130, -1, True, 4.5])
def test_person_rejects_bad_age(age) -> None:
    with pytest.raises(ValueError):
        Person(owner_id=1, name="Mia", age=age)


def test_person_blank_notes_become_none() -> None:
    assert Person(owner_id=1, name="Mia", notes="   ").notes is None
    assert Person(owner_id=1, name="Mia", age=None).age is None


def test_person_gets_id_on_insert(session_factory) -> None:
    with session_factory() as db:
        person = Person(owner_id=1, name="Mia")
        db.add(person)
        db.commit()
    assert len(person.id) == 12


def test_caregiver_validates_language_and_intervals() -> None:
    with pytest.raises(ValueError):
        Caregiver(tg_id=1, language="de")
    with pytest.raises(ValueError):
        Caregiver(tg_id=1, checkup_interval_min=0)
    with pytest.raises(ValueError):
        Caregiver(tg_id=1, alarm_interval_min="2")
    with pytest.raises(ValueError):
        Caregiver(tg_id=1, checkup_interval_min=MAX_INTERVAL_MIN + 1)
    assert Caregiver(tg_id=1, language="ru", checkup_interval_min=15).checkup_interval_min == 15


def test_sleep_log_action_is_restricted() -> None:
    assert SleepLog(action=SleepAction.CHECKUP).action == "checkup"
    with pytest.raises(ValueError):
        SleepLog(action="nap")


def test_timestamps_round_trip_as_utc(session_factory) -> None:
    ts = datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc)
    with session_factory() as db:
        db.add(SleepLog(owner_id=1, person_id="p1", person_name="Mia", action="start", timestamp=ts, session_id="s1"))
        db.commit()
    with session_factory() as db:
        stored = db.query(SleepLog).one()
    assert stored.timestamp == ts
    assert stored.timestamp.tzinfo == timezone.utc


def test_naive_timestamp_is_rejected(session_factory) -> None:
    with session_factory() as db:
        db.add(SleepLog(owner_id=1, person_id="p1", person_name="Mia", action="start", timestamp=datetime(2024, 3, 1), session_id="s1"))
        with pytest.raises(Exception):
            db.commit()
