"""
SQLAlchemy model for the database student store: one row per student name.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, JSON

from study_planner.core.db import Base


def _utc_now() -> datetime:
    """UTC now as naive datetime for DateTime(timezone=False) columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StudentRecordRow(Base):
    """Everything stored for one student. Replaced wholesale on every put."""
    __tablename__ = "student_records"

    student_name = Column(String(255), primary_key=True)
    profile = Column(JSON, nullable=False)  # {parent, studyHours, studySlot, subjects}
    schedule = Column(JSON, nullable=False)  # list of slot dicts
    assignments = Column(JSON, nullable=False)  # list of assignment dicts
    tasks = Column(JSON, nullable=False)  # list of task dicts
    updated_at = Column(DateTime(timezone=False), default=_utc_now, onupdate=_utc_now, nullable=False)
