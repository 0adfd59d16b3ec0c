import pytest
from fastapi.testclient import TestClient

from study_planner.api import create_app
from study_planner.core.config import Config
from study_planner.core.db import dispose_db
from study_planner.core.store import MemoryStudentStore, get_store
from study_planner.planner.models import Parent, Subject
from study_planner.planner.notifications import ParentNotifier
from study_planner.planner.service import PlannerService


class RecordingNotifier(ParentNotifier):
    """Keeps every (email, payload) it was asked to send."""

    def __init__(self, succeed=True):
        self.succeed = succeed
        self.sent = []

    def send(self, parent_email, payload):
        self.sent.append((parent_email, payload))
        return self.succeed


@pytest.fixture(params=["memory", "database"])
def store(request):
    dispose_db()
    yield get_store({"backend": request.param, "url": "sqlite://"})
    dispose_db()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(store, notifier):
    return PlannerService(store, notifier)


@pytest.fixture
def asha_subjects():
    return [Subject(name="Math"), Subject(name="Science", syllabus="Chapter 4"), Subject(name="English")]


@pytest.fixture
def asha_parent():
    return Parent(name="Ravi", email="ravi@example.com")


@pytest.fixture
def client():
    app = create_app(Config(data={}), store=MemoryStudentStore())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def asha_request():
    return {
        "studentName": "Asha",
        "studyHours": 6,
        "studySlot": "Evening",
        "parent": {"name": "Ravi", "email": "ravi@example.com"},
        "subjects": [{"name": "Math"}, {"name": "Science"}, {"name": "English"}],
    }
