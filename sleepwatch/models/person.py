from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import validates

from sleepwatch.database import Base

MAX_NAME_LENGTH = 100


def new_person_id() -> str:
    return uuid4().hex[:12]


class Person(Base):
    """Someone in a caregiver's care whose sleep is monitored."""

    __tablename__ = "people"

    id = Column(String(32), primary_key=True, default=new_person_id)
    owner_id = Column(Integer, index=True, nullable=False)  # Caregiver.tg_id
    name = Column(String(MAX_NAME_LENGTH), nullable=False)
    age = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    notifications_enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @validates("name")
    def _validate_name(self, key, value):
        value = (value or "").strip()
        if not value or len(value) > MAX_NAME_LENGTH:
            raise ValueError("Person name must be 1-100 characters")
        return value

    @validates("age")
    def _validate_age(self, key, value):
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or not (0 < value < 130):
            raise ValueError(f"Invalid age: {value!r}")
        return value

    @validates("notes")
    def _validate_notes(self, key, value):
        if value is None:
            return None
        return value.strip() or None
