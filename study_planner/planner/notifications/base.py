"""
Interface for parent notification backends.
"""
from abc import ABC, abstractmethod
from typing import Optional

from study_planner.planner.models import AlertPayload


class ParentNotifier(ABC):
    """Abstract backend: deliver an incomplete-task alert to a parent."""

    # Message returned to the caller when send() succeeds
    success_message = "Alert sent to parent."
    failure_message = "Alert could not be delivered."

    @abstractmethod
    def send(self, parent_email: Optional[str], payload: AlertPayload) -> bool:
        """Deliver the alert. Return True on success, False on failure; do not raise."""
        pass
