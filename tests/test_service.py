import logging

import pytest

from study_planner.planner.errors import InvalidData, MissingRequiredData, StudentNotFound
from study_planner.planner.models import Subject
from study_planner.planner.service import OVERVIEW_NOT_FOUND, PlannerService

from .conftest import RecordingNotifier


def _generate_asha(service, asha_subjects, asha_parent):
    return service.generate_schedule("Asha", 6, study_slot="Evening", parent=asha_parent, subjects=asha_subjects)


def test_generate_schedule_splits_hours_evenly(service, asha_subjects, asha_parent):
    plan = _generate_asha(service, asha_subjects, asha_parent)

    assert plan.time_per_subject == 2.0
    record = plan.record
    assert [s.slot for s in record.schedule] == ["Slot 1", "Slot 2", "Slot 3"]
    assert [s.subject for s in record.schedule] == ["Math", "Science", "English"]
    assert all(str(s.duration) == "2 hr" for s in record.schedule)

    assert [a.id for a in record.assignments] == ["Asha-assn-1", "Asha-assn-2", "Asha-assn-3"]
    assert [a.due_week for a in record.assignments] == [1, 2, 3]
    assert all(a.marks is None for a in record.assignments)
    assert record.assignments[0].syllabus == "Syllabus-based exercise"
    assert record.assignments[1].syllabus == "Chapter 4"

    assert [t.id for t in record.tasks] == ["Asha-task-1", "Asha-task-2", "Asha-task-3"]
    assert not any(t.done for t in record.tasks)
    assert all(t.duration.value == 2.0 for t in record.tasks)


def test_generate_schedule_stores_record(service, store, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)

    stored = store.get("Asha")
    assert stored is not None
    assert stored.profile.study_hours == 6
    assert stored.profile.study_slot == "Evening"
    assert stored.profile.parent.email == "ravi@example.com"
    assert [s.name for s in stored.profile.subjects] == ["Math", "Science", "English"]
    assert store.names() == ["Asha"]


@pytest.mark.parametrize("hours, count, expected", [
    (10, 3, 3.3),
    (5, 2, 2.5),
    (1, 3, 0.3),
    (4.5, 2, 2.3),
])
def test_time_per_subject_is_rounded_to_one_decimal(service, hours, count, expected):
    subjects = [Subject(name=f"S{i}") for i in range(count)]
    plan = service.generate_schedule("Kai", hours, subjects=subjects)
    assert plan.time_per_subject == expected
    assert all(s.duration.value == expected for s in plan.record.schedule)


@pytest.mark.parametrize("name, hours, subjects", [
    (None, 6, [Subject(name="Math")]),
    ("", 6, [Subject(name="Math")]),
    ("Asha", None, [Subject(name="Math")]),
    ("Asha", 0, [Subject(name="Math")]),
    ("Asha", 6, None),
    ("Asha", 6, []),
])
def test_generate_schedule_missing_data(service, store, name, hours, subjects):
    with pytest.raises(MissingRequiredData):
        service.generate_schedule(name, hours, subjects=subjects)
    assert store.names() == []


def test_regenerate_replaces_everything(service, store, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    service.update_tasks("Asha", ["Asha-task-1", "Asha-task-2", "Asha-task-3"])
    service.update_marks("Asha", [{"index": 0, "score": 90}])

    service.generate_schedule("Asha", 3, study_slot="Morning", subjects=[Subject(name="History"), Subject(name="Art")])

    record = store.get("Asha")
    assert [t.subject for t in record.tasks] == ["History", "Art"]
    assert not any(t.done for t in record.tasks)
    assert all(a.marks is None for a in record.assignments)
    assert record.profile.parent is None
    assert record.profile.study_slot == "Morning"


def test_update_tasks_counts(service, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    progress = service.update_tasks("Asha", ["Asha-task-1"])

    assert (progress.total, progress.done, progress.incomplete) == (3, 1, 2)
    assert [t.done for t in progress.tasks] == [True, False, False]


def test_update_tasks_is_full_replace(service, store, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    service.update_tasks("Asha", ["Asha-task-1", "Asha-task-2"])
    progress = service.update_tasks("Asha", ["Asha-task-3"])

    assert [t.done for t in progress.tasks] == [False, False, True]
    assert [t.done for t in store.get("Asha").tasks] == [False, False, True]


def test_update_tasks_is_idempotent(service, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    first = service.update_tasks("Asha", ["Asha-task-2", "unknown-id"])
    second = service.update_tasks("Asha", ["Asha-task-2", "unknown-id"])
    assert [t.done for t in first.tasks] == [t.done for t in second.tasks] == [False, True, False]


def test_update_tasks_without_ids_clears_all(service, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    service.update_tasks("Asha", ["Asha-task-1"])
    progress = service.update_tasks("Asha", None)
    assert progress.done == 0
    assert progress.incomplete == 3


def test_unknown_student_is_not_found(service):
    with pytest.raises(StudentNotFound):
        service.update_tasks("Nobody", [])
    with pytest.raises(StudentNotFound):
        service.alert_parent("Nobody")
    with pytest.raises(StudentNotFound):
        service.update_marks("Nobody", [])
    with pytest.raises(StudentNotFound) as excinfo:
        service.overview("Nobody")
    assert excinfo.value.message == OVERVIEW_NOT_FOUND
    with pytest.raises(StudentNotFound):
        service.overview(None)


def test_alert_parent_sends_incomplete_tasks(service, notifier, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    service.update_tasks("Asha", ["Asha-task-1"])

    alert = service.alert_parent("Asha")

    assert alert.success is True
    assert alert.payload.to == "ravi@example.com"
    assert alert.payload.parent_name == "Ravi"
    assert alert.payload.student_name == "Asha"
    assert [t.id for t in alert.payload.incomplete_tasks] == ["Asha-task-2", "Asha-task-3"]
    assert len(notifier.sent) == 1
    assert notifier.sent[0][0] == "ravi@example.com"


def test_alert_parent_reports_failed_delivery(store, asha_subjects, asha_parent):
    service = PlannerService(store, RecordingNotifier(succeed=False))
    _generate_asha(service, asha_subjects, asha_parent)

    alert = service.alert_parent("Asha")
    assert alert.success is False
    assert alert.message == "Alert could not be delivered."


def test_alert_parent_without_parent(service):
    service.generate_schedule("Kai", 2, subjects=[Subject(name="Math")])
    alert = service.alert_parent("Kai")
    assert alert.payload.to is None
    assert alert.payload.parent_name is None


def test_update_marks_by_position(service, store, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    assignments = service.update_marks("Asha", [{"index": 0, "score": 85}])

    assert [a.marks for a in assignments] == [85, None, None]
    assert [a.marks for a in store.get("Asha").assignments] == [85, None, None]


def test_update_marks_skips_invalid_entries(service, store, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    entries = [
        {"index": 3, "score": 50},
        {"index": -1, "score": 50},
        {"index": "1", "score": 50},
        {"index": 1.5, "score": 50},
        {"index": True, "score": 50},
        {"index": 1, "score": "50"},
        {"index": 1, "score": float("nan")},
        {"index": 1, "score": float("inf")},
        {"index": 1, "score": None},
        {"score": 50},
        "garbage",
        None,
        {"index": 2.0, "score": 72.5},
    ]
    assignments = service.update_marks("Asha", entries)

    assert [a.marks for a in assignments] == [None, None, 72.5]


@pytest.mark.parametrize("name, marks", [
    (None, []),
    ("", []),
    ("Asha", None),
    ("Asha", {"index": 0, "score": 1}),
    ("Asha", "85"),
])
def test_update_marks_invalid_shape(service, asha_subjects, asha_parent, name, marks):
    _generate_asha(service, asha_subjects, asha_parent)
    with pytest.raises(InvalidData):
        service.update_marks(name, marks)


def test_overview_scenario(service, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    service.update_tasks("Asha", ["Asha-task-1"])
    service.update_marks("Asha", [{"index": 0, "score": 85}])

    summary = service.overview("Asha").summary

    assert summary.avg_marks == 85
    assert summary.completion_percent == 33
    assert summary.active_subject == "Science"
    assert summary.planned_hours == 6.0
    assert summary.completed_hours == 2.0
    assert summary.alerts_this_week == 2


def test_overview_fresh_plan(service, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    summary = service.overview("Asha").summary

    assert summary.completion_percent == 0
    assert summary.completed_hours == 0
    assert summary.avg_marks is None
    assert summary.active_subject == "Math"
    assert summary.alerts_this_week == 3


def test_overview_all_done(service, asha_subjects, asha_parent):
    _generate_asha(service, asha_subjects, asha_parent)
    service.update_tasks("Asha", ["Asha-task-1", "Asha-task-2", "Asha-task-3"])
    service.update_marks("Asha", [{"index": 0, "score": 80}, {"index": 1, "score": 91}])

    summary = service.overview("Asha").summary
    assert summary.completion_percent == 100
    assert summary.completed_hours == 6.0
    assert summary.alerts_this_week == 0
    # mean 85.5 rounds up
    assert summary.avg_marks == 86
    # nothing incomplete: falls back to the first slot
    assert summary.active_subject == "Math"


def test_overview_uneven_hours(service):
    subjects = [Subject(name="A"), Subject(name="B"), Subject(name="C")]
    service.generate_schedule("Kai", 10, subjects=subjects)
    service.update_tasks("Kai", ["Kai-task-1"])

    summary = service.overview("Kai").summary
    # 3 x 3.3
    assert summary.planned_hours == 9.9
    assert summary.completed_hours == 3.3


def test_regenerate_logs_replacement(service, asha_subjects, asha_parent, caplog):
    with caplog.at_level(logging.INFO, logger="study_planner.planner.service"):
        _generate_asha(service, asha_subjects, asha_parent)
        assert "Replacing existing plan" not in caplog.text

        _generate_asha(service, asha_subjects, asha_parent)
        assert "Replacing existing plan for Asha" in caplog.text
