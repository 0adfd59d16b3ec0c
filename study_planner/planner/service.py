"""
Service layer: generate study plans and track progress for one student at a time.
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from study_planner.core.store import StudentStore
from study_planner.planner.errors import InvalidData, MissingRequiredData, StudentNotFound
from study_planner.planner.models import (
    DEFAULT_SYLLABUS,
    AlertPayload,
    Assignment,
    Duration,
    GeneratedPlan,
    Number,
    OverviewSummary,
    Parent,
    ParentAlert,
    ParentOverview,
    ScheduleSlot,
    StudentProfile,
    StudentRecord,
    Subject,
    Task,
    TaskProgress,
    round_half_up,
    round_whole,
)
from study_planner.planner.notifications import LoggingNotifier, ParentNotifier

logger = logging.getLogger(__name__)

OVERVIEW_NOT_FOUND = "Student not found. Ask your child to generate a plan first."
NO_ACTIVE_SUBJECT = "-"


def _is_number(value: Any) -> bool:
    """True for int/float that is not a bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_position(index: Any, size: int) -> Optional[int]:
    """Return index as a list position if it is an integral number in [0, size), else None."""
    if not _is_number(index):
        return None
    if isinstance(index, float):
        if not index.is_integer():
            return None
        index = int(index)
    if 0 <= index < size:
        return index
    return None


class PlannerService:
    """Every operation reads and writes whole StudentRecords through the store."""

    def __init__(self, store: StudentStore, notifier: Optional[ParentNotifier] = None):
        self.store = store
        self.notifier = notifier or LoggingNotifier()

    def _require(self, student_name: Optional[str], message: Optional[str] = None) -> StudentRecord:
        record = self.store.get(student_name) if student_name else None
        if record is None:
            logger.warning(f"Unknown student: {student_name!r}")
            raise StudentNotFound(message)
        return record

    def generate_schedule(
        self,
        student_name: Optional[str],
        study_hours: Optional[Number],
        study_slot: Optional[str] = None,
        parent: Optional[Parent] = None,
        subjects: Optional[List[Subject]] = None,
    ) -> GeneratedPlan:
        """Split study_hours evenly over subjects; replaces anything stored for the student."""
        if not student_name or not study_hours or not subjects:
            raise MissingRequiredData()

        time_per_subject = round_half_up(study_hours / len(subjects))
        duration = Duration(value=time_per_subject)

        schedule = [
            ScheduleSlot(slot=f"Slot {n}", subject=subject.name, duration=duration)
            for n, subject in enumerate(subjects, start=1)
        ]
        assignments = [
            Assignment(
                id=f"{student_name}-assn-{n}",
                subject=subject.name,
                syllabus=subject.syllabus or DEFAULT_SYLLABUS,
                due_week=n,
            )
            for n, subject in enumerate(subjects, start=1)
        ]
        tasks = [
            Task(id=f"{student_name}-task-{n}", subject=slot.subject, duration=slot.duration)
            for n, slot in enumerate(schedule, start=1)
        ]

        if self.store.exists(student_name):
            logger.info(f"Replacing existing plan for {student_name}; previous progress and marks are discarded")

        record = StudentRecord(
            student_name=student_name,
            profile=StudentProfile(
                parent=parent,
                study_hours=study_hours,
                study_slot=study_slot,
                subjects=list(subjects),
            ),
            schedule=schedule,
            assignments=assignments,
            tasks=tasks,
        )
        self.store.put(record)
        logger.info(f"Generated schedule for {student_name}: {len(subjects)} subjects, {time_per_subject} hr each")
        return GeneratedPlan(record=record, time_per_subject=time_per_subject)

    def update_tasks(self, student_name: Optional[str], completed_task_ids: Optional[Iterable[str]]) -> TaskProgress:
        """Mark exactly the listed task ids as done; every other task becomes not done."""
        record = self._require(student_name)
        completed = {i for i in (completed_task_ids or []) if isinstance(i, str)}
        for task in record.tasks:
            task.done = task.id in completed
        self.store.put(record)

        total = len(record.tasks)
        done = sum(1 for t in record.tasks if t.done)
        logger.info(f"Updated tasks for {student_name}: {done}/{total} done")
        return TaskProgress(total=total, done=done, incomplete=total - done, tasks=record.tasks)

    def alert_parent(self, student_name: Optional[str]) -> ParentAlert:
        """Send the parent the list of incomplete tasks through the configured notifier."""
        record = self._require(student_name)
        parent = record.profile.parent or Parent()
        payload = AlertPayload(
            to=parent.email,
            parent_name=parent.name,
            student_name=record.student_name,
            incomplete_tasks=record.incomplete_tasks(),
        )
        success = self.notifier.send(parent.email, payload)
        if not success:
            logger.warning(f"Parent alert for {student_name} was not delivered")
        message = self.notifier.success_message if success else self.notifier.failure_message
        return ParentAlert(success=success, message=message, payload=payload)

    def update_marks(self, student_name: Optional[str], marks: Any) -> List[Assignment]:
        """
        Apply [{index, score}] entries to assignments by list position.
        Entries with an out-of-range/non-integral index or a non-finite score are skipped.
        """
        if not student_name or not isinstance(marks, list):
            raise InvalidData()
        record = self._require(student_name)

        assignments = record.assignments
        for entry in marks:
            if not isinstance(entry, dict):
                logger.debug(f"Skipping marks entry {entry!r}: not an object")
                continue
            position = _as_position(entry.get("index"), len(assignments))
            score = entry.get("score")
            if position is None or not _is_number(score) or not math.isfinite(score):
                logger.debug(f"Skipping marks entry {entry!r}")
                continue
            assignments[position].marks = score

        self.store.put(record)
        logger.info(f"Updated marks for {student_name}")
        return assignments

    def overview(self, student_name: Optional[str]) -> ParentOverview:
        """Read-only snapshot for the parent dashboard."""
        record = self._require(student_name, OVERVIEW_NOT_FOUND)
        return ParentOverview(record=record, summary=summarize(record))


def summarize(record: StudentRecord) -> OverviewSummary:
    """Derived progress numbers; nothing here is stored."""
    total_tasks = len(record.tasks)
    done_tasks = sum(1 for t in record.tasks if t.done)
    incomplete_tasks = total_tasks - done_tasks
    completion_percent = round_whole(done_tasks / total_tasks * 100) if total_tasks else 0

    planned_hours = sum(slot.duration.value for slot in record.schedule if math.isfinite(slot.duration.value))
    time_per_task = planned_hours / total_tasks if planned_hours and total_tasks else 0
    completed_hours = round_half_up(done_tasks * time_per_task)

    graded = [a.marks for a in record.assignments if a.marks is not None]
    avg_marks = round_whole(sum(graded) / len(graded)) if graded else None

    first_incomplete = next((t for t in record.tasks if not t.done), None)
    if first_incomplete is not None:
        active_subject = first_incomplete.subject
    elif record.schedule:
        active_subject = record.schedule[0].subject
    else:
        active_subject = NO_ACTIVE_SUBJECT

    return OverviewSummary(
        completion_percent=completion_percent,
        planned_hours=round_half_up(planned_hours),
        completed_hours=completed_hours,
        # Point-in-time count; there is no alert history
        alerts_this_week=incomplete_tasks,
        avg_marks=avg_marks,
        active_subject=active_subject,
    )
