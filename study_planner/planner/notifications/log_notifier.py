"""
Default notifier: no email transport, the payload is only written to the log.
"""
import logging
from typing import Optional

from study_planner.planner.models import AlertPayload

from .base import ParentNotifier


class LoggingNotifier(ParentNotifier):
    """Simulated delivery. Logs the would-be email and always reports success."""

    success_message = "Alert simulated. In real backend, email would be sent."

    def __init__(self, config: Optional[dict] = None, logger: Optional[logging.Logger] = None):
        self.config = config or {}
        self.logger = logger or logging.getLogger(__name__)

    def send(self, parent_email: Optional[str], payload: AlertPayload) -> bool:
        self.logger.info(f"Simulated email payload: {payload.model_dump(mode='json')}")
        return True
