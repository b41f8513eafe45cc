"""Task execution — bounded, deduplicating dispatcher."""

from volumefs.tasks.dispatcher import Dispatcher, TaskState

__all__ = ["Dispatcher", "TaskState"]
