"""
Storage for student records. The service only talks to StudentStore, so the
in-memory dict can be swapped for the SQLAlchemy-backed store via config.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete

from study_planner.core.db import init_db, session_scope
from study_planner.core.models import StudentRecordRow
from study_planner.planner.models import StudentRecord

logger = logging.getLogger(__name__)


class StudentStore(ABC):
    """Get/put of whole student records, keyed by student name."""

    @abstractmethod
    def get(self, student_name: str) -> Optional[StudentRecord]:
        pass

    @abstractmethod
    def put(self, record: StudentRecord) -> None:
        """Insert or replace the record for record.student_name."""
        pass

    @abstractmethod
    def names(self) -> List[str]:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    def exists(self, student_name: Optional[str]) -> bool:
        if not student_name:
            return False
        return self.get(student_name) is not None


class MemoryStudentStore(StudentStore):
    """Process-lifetime dict. Last write wins."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._records: Dict[str, StudentRecord] = {}

    def get(self, student_name: str) -> Optional[StudentRecord]:
        return self._records.get(student_name)

    def put(self, record: StudentRecord) -> None:
        self._records[record.student_name] = record

    def names(self) -> List[str]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()


class DatabaseStudentStore(StudentStore):
    """One StudentRecordRow per student; JSON columns hold the nested lists."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        init_db(config.get("url"))

    def get(self, student_name: str) -> Optional[StudentRecord]:
        with session_scope() as session:
            row = session.get(StudentRecordRow, student_name)
            if row is None:
                return None
            return StudentRecord.model_validate({
                "student_name": row.student_name,
                "profile": row.profile,
                "schedule": row.schedule,
                "assignments": row.assignments,
                "tasks": row.tasks,
            })

    def put(self, record: StudentRecord) -> None:
        data = record.model_dump(mode="json")
        with session_scope() as session:
            row = session.get(StudentRecordRow, record.student_name)
            if row is None:
                row = StudentRecordRow(student_name=record.student_name)
                session.add(row)
            row.profile = data["profile"]
            row.schedule = data["schedule"]
            row.assignments = data["assignments"]
            row.tasks = data["tasks"]

    def names(self) -> List[str]:
        with session_scope() as session:
            return list(session.execute(select(StudentRecordRow.student_name)).scalars().all())

    def clear(self) -> None:
        with session_scope() as session:
            session.execute(delete(StudentRecordRow))


_STORES = {
    "memory": MemoryStudentStore,
    "database": DatabaseStudentStore,
}


def get_store(storage_config: Optional[Dict[str, Any]] = None) -> StudentStore:
    """Factory: return the store named by storage.backend (default memory)."""
    storage_config = storage_config or {}
    backend = (storage_config.get("backend") or "memory").lower()
    cls = _STORES.get(backend)
    if not cls:
        raise ValueError(f"Unknown storage backend: {backend}")
    logger.info(f"Using {backend} student store")
    return cls(storage_config)
