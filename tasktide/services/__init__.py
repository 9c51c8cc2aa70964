"""
Business logic services for Tasktide.
"""

from tasktide.services.preferences import PreferenceService, ViewPreferences
from tasktide.services.tasks import TaskService

__all__ = [
    "TaskService",
    "PreferenceService",
    "ViewPreferences",
]
