from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import validates

from sleepwatch.database import Base, UTCDateTime, utcnow


class SleepAction(str, Enum):
    START = "start"
    CHECKUP = "checkup"
    END = "end"


class SleepLog(Base):
    """Append-only record of a session lifecycle event."""

    __tablename__ = "sleep_logs"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, index=True, nullable=False)
    person_id = Column(String(32), index=True, nullable=False)
    person_name = Column(String, nullable=False)
    action = Column(String(10), nullable=False)  # start / checkup / end
    timestamp = Column(UTCDateTime, default=utcnow, nullable=False)
    session_id = Column(String(32), index=True, nullable=False)
    notes = Column(Text, nullable=True)

    @validates("action")
    def _validate_action(self, key, value):
        return SleepAction(value).value
