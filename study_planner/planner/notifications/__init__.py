from .base import ParentNotifier
from .log_notifier import LoggingNotifier

__all__ = ["ParentNotifier", "LoggingNotifier", "get_notifier"]

_NOTIFIERS = {
    "log": LoggingNotifier,
}


def get_notifier(backend_type: str, config: dict = None, logger=None) -> ParentNotifier:
    """Factory: return notifier instance for given type."""
    cls = _NOTIFIERS.get((backend_type or "log").lower())
    if not cls:
        raise ValueError(f"Unknown notifications backend: {backend_type}")
    return cls(config, logger=logger)
