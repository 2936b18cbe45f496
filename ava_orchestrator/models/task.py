"""
Task model - The unit of work tracked end-to-end by the task manager
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
import uuid

from ava_orchestrator.models.enums import TaskStatus
from ava_orchestrator.utils.exceptions import InvalidTransitionError


ALLOWED_TRANSITIONS: Dict[TaskStatus, frozenset] = {
    # pending -> failed only covers a failed analysis before dispatch
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.FAILED}),
    TaskStatus.IN_PROGRESS: frozenset({
        TaskStatus.IN_PROGRESS,
        TaskStatus.COMPLETED,
        TaskStatus.FAILED,
    }),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
}


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """Return True if ``current -> target`` is a legal status change."""
    return TaskStatus(target) in ALLOWED_TRANSITIONS[TaskStatus(current)]


@dataclass
class Task:
    """
    A tracked task.

    Attributes:
        id: Unique task id
        description: Natural-language instruction as given by the user
        status: Lifecycle status
        assigned_to: Agent the task was dispatched to (observer, executor or an external agent)
        result: Result payload returned by the assigned agent
        license_id: License minted for the result
        timestamp: ISO 8601 time of the last mutation
    """
    description: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: TaskStatus = TaskStatus.PENDING
    assigned_to: Optional[str] = None
    result: Any = None
    license_id: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def __post_init__(self):
        self.status = TaskStatus(self.status)

    def transition(self, target: TaskStatus) -> None:
        """
        Move the task to ``target``.

        Raises:
            InvalidTransitionError: If the change is not allowed from the current status
        """
        target = TaskStatus(target)
        if not can_transition(self.status, target):
            raise InvalidTransitionError(self.id, self.status.value, target.value)
        self.status = target
        self.touch()

    def touch(self) -> None:
        self.timestamp = datetime.now().isoformat()

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "status": self.status.value,
            "assigned_to": self.assigned_to,
            "result": self.result,
            "license_id": self.license_id,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=data["id"],
            description=data["description"],
            status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
            assigned_to=data.get("assigned_to"),
            result=data.get("result"),
            license_id=data.get("license_id"),
            timestamp=data.get("timestamp") or datetime.now().isoformat(),
        )
