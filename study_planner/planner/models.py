"""
Domain types for study plans. Everything stored for one student lives in a StudentRecord.

Durations are kept as numbers with a unit and only turned into display strings
("2.5 hr") by the HTTP layer.
"""
import math
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]

DEFAULT_SYLLABUS = "Syllabus-based exercise"
DURATION_UNIT = "hr"


def round_half_up(value: float, places: int = 1) -> float:
    """Round on the exact binary value, ties away from zero (2.25 -> 2.3)."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def round_whole(value: float) -> int:
    """Round to an integer, ties toward positive infinity (2.5 -> 3, -2.5 -> -2)."""
    return int((Decimal(value) + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def format_number(value: Number) -> str:
    """
    Shortest decimal text, laid out the way browsers print numbers:
    2.0 -> "2", 2.5 -> "2.5", 1e-6 -> "0.000001", 1e-7 -> "1e-7", 1e21 -> "1e+21".
    """
    if not isinstance(value, float):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    # value == 0.digits * 10**n
    n = k + exponent
    prefix = "-" if sign else ""

    if k <= n <= 21:
        return prefix + digits + "0" * (n - k)
    if 0 < n <= 21:
        return prefix + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return prefix + "0." + "0" * -n + digits
    mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
    return f"{prefix}{mantissa}e{n - 1:+d}"


class Duration(BaseModel):
    value: float
    unit: str = DURATION_UNIT

    def __str__(self) -> str:
        return f"{format_number(self.value)} {self.unit}"


class Parent(BaseModel):
    """Parent contact; unknown keys are kept as sent."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None


class Subject(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    syllabus: Optional[str] = None


class StudentProfile(BaseModel):
    parent: Optional[Parent] = None
    study_hours: Number
    study_slot: Optional[str] = None
    subjects: List[Subject] = Field(default_factory=list)


class ScheduleSlot(BaseModel):
    slot: str  # "Slot N", 1-based
    subject: str
    duration: Duration


class Assignment(BaseModel):
    id: str  # "{student}-assn-{n}"
    subject: str
    syllabus: str = DEFAULT_SYLLABUS
    due_week: int
    marks: Optional[Number] = None


class Task(BaseModel):
    id: str  # "{student}-task-{n}"
    subject: str
    duration: Duration
    done: bool = False


class StudentRecord(BaseModel):
    """Profile, schedule, assignments and tasks of one student."""
    student_name: str
    profile: StudentProfile
    schedule: List[ScheduleSlot] = Field(default_factory=list)
    assignments: List[Assignment] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)

    def incomplete_tasks(self) -> List[Task]:
        return [t for t in self.tasks if not t.done]


class GeneratedPlan(BaseModel):
    record: StudentRecord
    time_per_subject: float


class TaskProgress(BaseModel):
    total: int
    done: int
    incomplete: int
    tasks: List[Task]


class AlertPayload(BaseModel):
    to: Optional[str] = None
    parent_name: Optional[str] = None
    student_name: str
    incomplete_tasks: List[Task]


class ParentAlert(BaseModel):
    success: bool
    message: str
    payload: AlertPayload


class OverviewSummary(BaseModel):
    completion_percent: int
    planned_hours: float
    completed_hours: float
    alerts_this_week: int
    avg_marks: Optional[int] = None
    active_subject: str


class ParentOverview(BaseModel):
    record: StudentRecord
    summary: OverviewSummary

