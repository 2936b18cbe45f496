"""
Bus channels and payload formats

Channel names encode direction as ``<source>-<destination>``. Every payload
published on the bus is one of the TypedDicts below; ``CHANNEL_REGISTRY`` maps
each fixed channel to its payload type so emitters can be checked at runtime
(see ``ava_orchestrator.utils.validation``) and statically.
"""

from typing import TypedDict, Optional, Any, Literal, NotRequired
from datetime import datetime


# ============================================================================
# CHANNELS
# ============================================================================

TASK_MANAGER = "task-manager"


class Channel:
    """Well-known channel names."""
    TASK_MANAGER_OBSERVER = "task-manager-observer"
    OBSERVER_TASK_MANAGER = "observer-task-manager"
    TASK_MANAGER_EXECUTOR = "task-manager-executor"
    EXECUTOR_TASK_MANAGER = "executor-task-manager"

    # Broadcast channels for external consumers (UI, API)
    TASK_UPDATE = "task-update"
    AGENT_MESSAGE = "agent-message"
    AGENT_ERROR = "agent-error"
    AGENT_ACTION = "agent-action"


def dispatch_channel(agent: str) -> str:
    """Channel the task manager uses to hand a task to ``agent``."""
    return f"{TASK_MANAGER}-{agent}"


def reply_channel(agent: str) -> str:
    """Channel ``agent`` uses to report a result to the task manager."""
    return f"{agent}-{TASK_MANAGER}"


# ============================================================================
# PAYLOADS
# ============================================================================

StatusLiteral = Literal["pending", "in_progress", "completed", "failed", "partial", "routing"]


class ToolOutcome(TypedDict):
    """One itemised tool outcome inside a result payload."""
    tool: str
    status: Literal["success", "error"]
    result: NotRequired[Any]
    error: NotRequired[Optional[str]]


class TaskDispatchPayload(TypedDict):
    """
    Sent by: TaskManager
    Received by: Observer, Executor, external agents
    """
    taskId: str
    task: str
    timestamp: NotRequired[str]


class AgentResultPayload(TypedDict):
    """
    Sent by: Observer, Executor, external agents
    Received by: TaskManager
    """
    taskId: str
    status: StatusLiteral
    result: NotRequired[Any]
    toolResults: NotRequired[list[Any]]
    partialData: NotRequired[bool]
    error: NotRequired[Optional[str]]
    timestamp: NotRequired[str]


class TaskUpdatePayload(TypedDict):
    """Broadcast after every accepted result."""
    taskId: str
    status: StatusLiteral
    result: Any
    licenseId: Optional[str]
    timestamp: str


class AgentMessagePayload(TypedDict):
    """Human-readable progress line for external consumers."""
    role: Literal["assistant", "system", "user"]
    content: str
    timestamp: str
    agentName: str
    collaborationType: str
    taskId: NotRequired[Optional[str]]


class AgentErrorPayload(TypedDict):
    agent: str
    error: str
    timestamp: str
    taskId: NotRequired[Optional[str]]


class AgentActionPayload(TypedDict):
    agent: str
    action: str
    timestamp: str
    taskId: NotRequired[Optional[str]]


# Channel Registry - Maps fixed channels to their payload type
CHANNEL_REGISTRY: dict[str, type] = {
    Channel.TASK_MANAGER_OBSERVER: TaskDispatchPayload,
    Channel.TASK_MANAGER_EXECUTOR: TaskDispatchPayload,
    Channel.OBSERVER_TASK_MANAGER: AgentResultPayload,
    Channel.EXECUTOR_TASK_MANAGER: AgentResultPayload,
    Channel.TASK_UPDATE: TaskUpdatePayload,
    Channel.AGENT_MESSAGE: AgentMessagePayload,
    Channel.AGENT_ERROR: AgentErrorPayload,
    Channel.AGENT_ACTION: AgentActionPayload,
}


def payload_type_for(channel: str) -> Optional[type]:
    """
    Resolve the payload type of a channel, including per-agent external channels.

    Returns None for channels nobody declared.
    """
    if channel in CHANNEL_REGISTRY:
        return CHANNEL_REGISTRY[channel]
    if channel.startswith(f"{TASK_MANAGER}-"):
        return TaskDispatchPayload
    if channel.endswith(f"-{TASK_MANAGER}"):
        return AgentResultPayload
    return None


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _now() -> str:
    return datetime.now().isoformat()


def create_dispatch_payload(task_id: str, task: str) -> TaskDispatchPayload:
    return TaskDispatchPayload(taskId=task_id, task=task, timestamp=_now())


def create_result_payload(
    task_id: str,
    status: StatusLiteral,
    result: Any = None,
    tool_results: Optional[list[Any]] = None,
    partial_data: Optional[bool] = None,
    error: Optional[str] = None
) -> AgentResultPayload:
    """
    Helper function to create a reply-channel payload.

    Optional fields are only set when given, so consumers can tell
    "no tool results" from "tool results not reported".
    """
    payload = AgentResultPayload(taskId=task_id, status=status, result=result, timestamp=_now())
    if tool_results is not None:
        payload["toolResults"] = tool_results
    if partial_data is not None:
        payload["partialData"] = partial_data
    if error is not None:
        payload["error"] = error
    return payload


def create_task_update(
    task_id: str,
    status: StatusLiteral,
    result: Any,
    license_id: Optional[str]
) -> TaskUpdatePayload:
    return TaskUpdatePayload(
        taskId=task_id,
        status=status,
        result=result,
        licenseId=license_id,
        timestamp=_now()
    )


def create_agent_message(
    agent_name: str,
    content: str,
    collaboration_type: str,
    task_id: Optional[str] = None,
    role: Literal["assistant", "system", "user"] = "assistant"
) -> AgentMessagePayload:
    return AgentMessagePayload(
        role=role,
        content=content,
        timestamp=_now(),
        agentName=agent_name,
        collaborationType=collaboration_type,
        taskId=task_id
    )


def create_agent_error(agent: str, error: str, task_id: Optional[str] = None) -> AgentErrorPayload:
    return AgentErrorPayload(agent=agent, error=error, timestamp=_now(), taskId=task_id)


def create_agent_action(agent: str, action: str, task_id: Optional[str] = None) -> AgentActionPayload:
    return AgentActionPayload(agent=agent, action=action, timestamp=_now(), taskId=task_id)
