"""
Enums module - Task status and other enumeration types
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Enumeration of possible task statuses"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class ResultStatus(str, Enum):
    """Status carried on agent reply channels"""
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    ROUTING = "routing"


class AgentType(str, Enum):
    """Internal agents a task can be assigned to"""
    OBSERVER = "observer"
    EXECUTOR = "executor"
    TASK_MANAGER = "task-manager"


class ObserverState(str, Enum):
    """Per-task progress of the observer"""
    IDLE = "idle"
    RUNNING_TOOLS = "running_tools"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    PARTIAL_FAILED = "partial_failed"


class LicenseScope(str, Enum):
    """Reuse scope of a minted license"""
    PERSONAL = "personal"
    COMMERCIAL = "commercial"
    SUBLICENSABLE = "sublicensable"


class RouteKind(str, Enum):
    """Destination class returned by the task router"""
    OBSERVER = "observer"
    EXECUTOR = "executor"
    EXTERNAL = "external"
