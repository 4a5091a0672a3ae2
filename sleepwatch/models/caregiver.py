# sleepwatch/models/caregiver.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.orm import validates

from sleepwatch.config import DEFAULT_ALARM_INTERVAL_MIN, DEFAULT_CHECKUP_INTERVAL_MIN, MAX_INTERVAL_MIN
from sleepwatch.database import Base

LANGUAGES = ("en", "ru")


def _positive_minutes(key: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not (0 < value <= MAX_INTERVAL_MIN):
        raise ValueError(f"{key} must be between 1 and {MAX_INTERVAL_MIN} minutes, got {value!r}")
    return value


class Caregiver(Base):
    __tablename__ = "caregivers"

    id = Column(Integer, primary_key=True, index=True)
    tg_id = Column(Integer, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    language = Column(String, default="en")
    # installation-wide switch for check-up reminders
    notifications_enabled = Column(Boolean, default=False, nullable=False)
    checkup_interval_min = Column(Integer, default=DEFAULT_CHECKUP_INTERVAL_MIN, nullable=False)
    alarm_interval_min = Column(Integer, default=DEFAULT_ALARM_INTERVAL_MIN, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @validates("language")
    def _validate_language(self, key, value):
        if value not in LANGUAGES:
            raise ValueError(f"Unsupported language: {value!r}")
        return value

    @validates("checkup_interval_min", "alarm_interval_min")
    def _validate_interval(self, key, value):
        return _positive_minutes(key, value)
