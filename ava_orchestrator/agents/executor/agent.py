"""
Executor agent - Runs the simulate / plan / execute pipeline for a task

Stages run in a fixed order and a failed stage stops the pipeline: later
stages are never invoked. Each stage is reported on ``agent-message`` and
the run ends with one ``executor-task-manager`` event, ``completed`` or
``failed``. Tasks that are not DeFi actions never enter the pipeline; they
are sent back with status ``routing``.
"""

from typing import Any, Dict, List, Optional

from ava_orchestrator.agents.executor.toolkit import build_executor_toolkit
from ava_orchestrator.core.agent import Agent
from ava_orchestrator.core.event_bus import EventBus
from ava_orchestrator.core.router import TaskCategory, TaskRouter
from ava_orchestrator.core.tool import ToolExecutionOptions, ToolResult, Toolkit
from ava_orchestrator.models.enums import AgentType, ResultStatus
from ava_orchestrator.models.messages import create_result_payload, dispatch_channel, reply_channel
from ava_orchestrator.services.interfaces import (
    ChainClient,
    LicensingClient,
    StorageClient,
    TextGenerator,
    TransactionPlanner,
)
from ava_orchestrator.utils.exceptions import ConfigurationError
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)

# (tool name, agent-message collaboration type)
PIPELINE = (
    ("simulateTasks", "simulation"),
    ("getTransactionData", "transaction-data"),
    ("executeTransaction", "execution"),
)

ROUTE_BACK_MESSAGES = {
    TaskCategory.OBSERVATION: "Task requires observation. Routing to observer.",
    TaskCategory.ANALYSIS: "Task requires analysis. Routing back to task manager.",
    TaskCategory.UNKNOWN: "Task type unclear. Please clarify the required action.",
}


class StageFailed(Exception):
    """A pipeline stage returned a failed ToolResult."""

    def __init__(self, stage: str, result: ToolResult):
        super().__init__(result.error or f"{stage} failed")
        self.stage = stage
        self.result = result


class ExecutorAgent(Agent):
    """
    Agent turning instructions into on-chain transactions.

    The toolkit can be injected; otherwise it is built from the storage,
    planner and chain collaborators.
    """

    def __init__(
        self,
        event_bus: EventBus,
        storage: Optional[StorageClient] = None,
        planner: Optional[TransactionPlanner] = None,
        chain: Optional[ChainClient] = None,
        chain_id: int = 43114,
        llm: Optional[TextGenerator] = None,
        licensing: Optional[LicensingClient] = None,
        name: str = AgentType.EXECUTOR.value,
        toolkit: Optional[Toolkit] = None,
        router: Optional[TaskRouter] = None
    ):
        super().__init__(name, event_bus, llm=llm, storage=storage, licensing=licensing)
        if toolkit is None:
            if storage is None or planner is None or chain is None:
                raise ConfigurationError(
                    "executor", "ExecutorAgent needs storage, a transaction planner and a chain client, or a toolkit"
                )
            toolkit = build_executor_toolkit(storage, planner, chain, chain_id, llm)
        self.toolkit = toolkit
        self.router = router or TaskRouter()

    def channels(self) -> List[str]:
        return [dispatch_channel(self.name)]

    async def handle_event(self, event: str, data: Any) -> None:
        if event == dispatch_channel(self.name):
            await self.handle_task_manager_event(data)
        else:
            logger.warning(f"[{self.name}] Unhandled event: {event}")

    def _stage_args(self, stage: str, task_id: str, task: str) -> Dict[str, Any]:
        if stage == "getTransactionData":
            return {"tasks": [{"task": task, "taskId": task_id}]}
        if stage == "executeTransaction":
            return {"task": task, "taskId": task_id}
        return {}

    async def run_pipeline(
        self,
        task_id: str,
        task: str,
        outcomes: Optional[List[Dict[str, Any]]] = None
    ) -> List[Dict[str, Any]]:
        """
        Run every stage in order for one task.

        Args:
            outcomes: List the per-stage entries are appended to, so callers
                still see them when a stage fails

        Returns:
            One ``{"tool", "success", "result", "error"}`` entry per stage run

        Raises:
            StageFailed: On the first stage that returns a failure
        """
        outcomes = outcomes if outcomes is not None else []
        for stage, collaboration_type in PIPELINE:
            logger.info(f"[{self.name}] Running {stage} for task {task_id}")
            result = await self.toolkit[stage].execute(
                self._stage_args(stage, task_id, task),
                ToolExecutionOptions(tool_call_id=f"{stage}-{task_id}")
            )
            outcomes.append({"tool": stage, **result.to_dict()})
            await self.on_step_finish(None, [stage], [outcomes[-1]])

            if not result.success:
                raise StageFailed(stage, result)

            self.emit_message(self._describe_stage(stage, result), collaboration_type, task_id)
        return outcomes

    @staticmethod
    def _describe_stage(stage: str, result: ToolResult) -> str:
        if stage == "simulateTasks":
            if isinstance(result.result, dict):
                body = result.result.get("advice") or "\n\n".join(result.result.get("simulations", []))
            else:
                body = str(result.result or "")
            return f"DeFi Task Simulation:\n{body or 'No pending transactions.'}"
        if stage == "getTransactionData" and isinstance(result.result, list):
            return "Transaction data ready for: " + ", ".join(f'"{t["task"]}"' for t in result.result)
        if isinstance(result.result, dict) and "message" in result.result:
            return result.result["message"]
        return f"{stage} finished"

    async def handle_task_manager_event(self, data: Dict[str, Any]) -> None:
        task_id = data.get("taskId")
        task = data.get("task")
        if not task_id or not task:
            logger.error(f"[{self.name}] Invalid task data: missing taskId or task ({data})")
            self.emit_error("Invalid task data: missing taskId or task", task_id)
            return

        logger.info(f"[{self.name}] ========== Starting Task Execution ==========")
        category, _ = self.router.classify(task)
        logger.info(f"[{self.name}] Determined task type: {category.value}")
        self.emit_action(f"Starting execution of task: {task_id} (Type: {category.value})", task_id)

        if category != TaskCategory.DEFI_EXECUTION:
            message = ROUTE_BACK_MESSAGES[category]
            logger.info(f"[{self.name}] Not a DeFi task, sending {task_id} back: {message}")
            self.emit(reply_channel(self.name), create_result_payload(
                task_id, ResultStatus.ROUTING.value, result=message, tool_results=[]
            ))
            return

        outcomes: List[Dict[str, Any]] = []
        try:
            await self.run_pipeline(task_id, task, outcomes)
        except Exception as e:
            self._report_failure(task_id, str(e) or e.__class__.__name__, outcomes)
            return

        self.emit(reply_channel(self.name), create_result_payload(
            task_id,
            ResultStatus.COMPLETED.value,
            result=outcomes[-1]["result"],
            tool_results=outcomes
        ))

    def _report_failure(
        self,
        task_id: str,
        error: str,
        outcomes: List[Dict[str, Any]]
    ) -> None:
        logger.error(f"[{self.name}] Task {task_id} failed: {error}")
        self.emit(reply_channel(self.name), create_result_payload(
            task_id,
            ResultStatus.FAILED.value,
            result=error,
            tool_results=outcomes,
            error=error
        ))
        self.emit_action(f"Failed to execute task: {task_id}", task_id)
        self.emit_message(f"Failed to execute task: {error}", "error", task_id)
