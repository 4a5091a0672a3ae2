from sqlalchemy import Column, Integer, String

from sleepwatch.database import Base, UTCDateTime, utcnow


class NotificationLog(Base):
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False)
    notification_type = Column(String(50), nullable=False)  # checkup_due, checkup_overdue
    session_id = Column(String(32), nullable=True)
    sent_at = Column(UTCDateTime, default=utcnow, nullable=False)
