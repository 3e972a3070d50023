"""
Task subsystem.

Components:
- task_models.py: data structures (ScheduledTask, InvalidScheduleError) and due-time parsing
- task_queue.py: TaskQueue, the pending set and its drain pass
- poll_driver.py: fixed-cadence loop that drains the queue
- task_api.py: helpers the command layer uses to schedule cache refreshes
"""

from .task_models import InvalidScheduleError, ScheduledTask
from .task_queue import TaskQueue
from .poll_driver import DriverState, PollDriver

__all__ = ["DriverState", "InvalidScheduleError", "PollDriver", "ScheduledTask", "TaskQueue"]
