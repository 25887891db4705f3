"""Shared helpers: timers, background tasks, ids and similarity."""

from .ids import (
    is_valid_session_id,
    new_message_id,
    new_session_id,
    new_temp_id,
    new_visitor_id,
)
from .similarity import content_similarity, normalize_content
from .tasks import BackgroundTasks, cancel_task
from .timers import Timers

__all__ = [
    "BackgroundTasks",
    "Timers",
    "cancel_task",
    "content_similarity",
    "is_valid_session_id",
    "new_message_id",
    "new_session_id",
    "new_temp_id",
    "new_visitor_id",
    "normalize_content",
]
