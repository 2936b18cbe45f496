"""
Task manager toolkit - Messaging tools used while analysing a task
"""

from typing import Optional

from pydantic import BaseModel, Field

from ava_orchestrator.core.event_bus import EventBus
from ava_orchestrator.core.tool import Tool, ToolExecutionOptions, Toolkit
from ava_orchestrator.models.messages import create_dispatch_payload, dispatch_channel
from ava_orchestrator.utils.exceptions import RoutingError
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


class SendMessageArgs(BaseModel):
    message: str = Field(..., min_length=1)
    task_id: Optional[str] = None


class ForwardTaskArgs(BaseModel):
    agent: str = Field(..., min_length=1, description="External agent name")
    task_id: str = Field(..., min_length=1)
    task: str = Field(..., min_length=1, description="Task description, forwarded verbatim")


def build_task_manager_toolkit(event_bus: EventBus) -> Toolkit:
    """Build the task manager's tools. ``forwardToAgent`` publishes on ``event_bus``."""

    async def send_message_to_observer(args: SendMessageArgs, options: ToolExecutionOptions) -> str:
        return f"Message sent to observer: {args.message}"

    async def send_message_to_executor(args: SendMessageArgs, options: ToolExecutionOptions) -> str:
        return f"Message sent to executor: {args.message}"

    async def forward_to_agent(args: ForwardTaskArgs, options: ToolExecutionOptions) -> str:
        channel = dispatch_channel(args.agent)
        if not event_bus.has_listeners(channel):
            raise RoutingError(args.agent, channel)
        event_bus.emit(channel, create_dispatch_payload(args.task_id, args.task))
        logger.info(f"[forwardToAgent] task {args.task_id} forwarded to {args.agent}")
        return f"Task forwarded to {args.agent}: {args.task}"

    return Toolkit([
        Tool("sendMessageToObserver", "Send a message to the observer agent",
             send_message_to_observer, SendMessageArgs),
        Tool("sendMessageToExecutor", "Send a message to the executor agent",
             send_message_to_executor, SendMessageArgs),
        Tool("forwardToAgent", "Forward a task verbatim to a specialised external agent",
             forward_to_agent, ForwardTaskArgs),
    ])
