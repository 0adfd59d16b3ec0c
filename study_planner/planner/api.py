"""
HTTP API for the study planner. Mounted at /api/.
Wire names are camelCase; durations are rendered as "2.5 hr" strings here and nowhere else.
"""
from typing import Annotated, Any, List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from .models import Duration, Number, Parent, Subject
from .service import PlannerService


def _duration_text(value: Any) -> Any:
    return str(value) if isinstance(value, Duration) else value


DurationText = Annotated[str, BeforeValidator(_duration_text)]


class CamelModel(BaseModel):
    """Base for request/response bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Requests. Fields are optional so presence checks give the service's own errors.

class GenerateScheduleRequest(CamelModel):
    student_name: Optional[str] = None
    study_hours: Optional[Number] = None
    study_slot: Optional[str] = None
    parent: Optional[Parent] = None
    subjects: Optional[List[Subject]] = None


class UpdateTasksRequest(CamelModel):
    student_name: Optional[str] = None
    completed_task_ids: Optional[List[Any]] = None


class AlertParentRequest(CamelModel):
    student_name: Optional[str] = None


class UpdateMarksRequest(CamelModel):
    student_name: Optional[str] = None
    marks: Any = None  # expected [{index, score}]; shape checked by the service


# Responses

class ScheduleSlotResponse(CamelModel):
    slot: str
    subject: str
    duration: DurationText


class AssignmentResponse(CamelModel):
    id: str
    subject: str
    syllabus: str
    due_week: int
    marks: Optional[Number] = None


class TaskResponse(CamelModel):
    id: str
    subject: str
    duration: DurationText
    done: bool


class GenerateScheduleResponse(CamelModel):
    schedule: List[ScheduleSlotResponse]
    weekly_assignments: List[AssignmentResponse]
    today_tasks: List[TaskResponse]
    study_slot: Optional[str] = None
    time_per_subject: float


class UpdateTasksResponse(CamelModel):
    total: int
    done: int
    incomplete: int
    tasks: List[TaskResponse]


class AlertPayloadResponse(CamelModel):
    to: Optional[str] = None
    parent_name: Optional[str] = None
    student_name: str
    incomplete_tasks: List[TaskResponse]


class AlertParentResponse(CamelModel):
    success: bool
    message: str
    alert_payload: AlertPayloadResponse


class UpdateMarksResponse(CamelModel):
    success: bool
    assignments: List[AssignmentResponse]


class OverviewSummaryResponse(CamelModel):
    completion_percent: int
    planned_hours: float
    completed_hours: float
    alerts_this_week: int
    avg_marks: Optional[int] = None
    active_subject: str


class ParentOverviewResponse(CamelModel):
    student_name: str
    parent: Optional[Parent] = None
    study_hours: Number
    study_slot: Optional[str] = None
    subjects: List[Subject]
    schedule: List[ScheduleSlotResponse]
    assignments: List[AssignmentResponse]
    tasks: List[TaskResponse]
    summary: OverviewSummaryResponse


def get_router(service: PlannerService) -> APIRouter:
    """Return the planner router; mounted with prefix /api."""
    router = APIRouter(tags=["Study Planner"])

    @router.post("/generate-schedule", response_model=GenerateScheduleResponse)
    def generate_schedule(request: Optional[GenerateScheduleRequest] = None) -> GenerateScheduleResponse:
        """Split studyHours evenly across subjects and (re)create the student's plan."""
        request = request or GenerateScheduleRequest()
        plan = service.generate_schedule(
            request.student_name,
            request.study_hours,
            study_slot=request.study_slot,
            parent=request.parent,
            subjects=request.subjects,
        )
        record = plan.record
        return GenerateScheduleResponse(
            schedule=[ScheduleSlotResponse.model_validate(s) for s in record.schedule],
            weekly_assignments=[AssignmentResponse.model_validate(a) for a in record.assignments],
            today_tasks=[TaskResponse.model_validate(t) for t in record.tasks],
            study_slot=record.profile.study_slot,
            time_per_subject=plan.time_per_subject,
        )

    @router.post("/update-tasks", response_model=UpdateTasksResponse)
    def update_tasks(request: Optional[UpdateTasksRequest] = None) -> UpdateTasksResponse:
        """Set done=true for exactly the listed task ids."""
        request = request or UpdateTasksRequest()
        progress = service.update_tasks(request.student_name, request.completed_task_ids)
        return UpdateTasksResponse.model_validate(progress)

    @router.post("/alert-parent", response_model=AlertParentResponse)
    def alert_parent(request: Optional[AlertParentRequest] = None) -> AlertParentResponse:
        """Notify the parent about incomplete tasks (simulated by default)."""
        request = request or AlertParentRequest()
        alert = service.alert_parent(request.student_name)
        return AlertParentResponse(
            success=alert.success,
            message=alert.message,
            alert_payload=AlertPayloadResponse.model_validate(alert.payload),
        )

    @router.post("/update-marks", response_model=UpdateMarksResponse)
    def update_marks(request: Optional[UpdateMarksRequest] = None) -> UpdateMarksResponse:
        """Record assignment scores by list position."""
        request = request or UpdateMarksRequest()
        assignments = service.update_marks(request.student_name, request.marks)
        return UpdateMarksResponse(
            success=True,
            assignments=[AssignmentResponse.model_validate(a) for a in assignments],
        )

    @router.get("/parent-overview", response_model=ParentOverviewResponse)
    def parent_overview(
        student_name: Optional[str] = Query(default=None, alias="studentName"),
    ) -> ParentOverviewResponse:
        """Full plan plus derived progress summary for the parent dashboard."""
        overview = service.overview(student_name)
        record = overview.record
        return ParentOverviewResponse(
            student_name=record.student_name,
            parent=record.profile.parent,
            study_hours=record.profile.study_hours,
            study_slot=record.profile.study_slot,
            subjects=record.profile.subjects,
            schedule=[ScheduleSlotResponse.model_validate(s) for s in record.schedule],
            assignments=[AssignmentResponse.model_validate(a) for a in record.assignments],
            tasks=[TaskResponse.model_validate(t) for t in record.tasks],
            summary=OverviewSummaryResponse.model_validate(overview.summary),
        )

    return router
