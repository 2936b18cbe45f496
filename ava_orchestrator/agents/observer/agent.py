"""
Observer agent - Gathers read-only signals for a task and synthesizes an analysis

For each task dispatched on ``task-manager-observer`` the observer runs
every tool in its toolkit concurrently, each in isolation, then asks the
text generator for an analysis built from whatever came back. Some tools
failing degrades the result to ``partial``; every tool failing, or no tool
running at all, is reported as a ``partial`` event with an error and no
analysis.
"""

import asyncio
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from ava_orchestrator.agents.observer.toolkit import build_observer_toolkit, default_tool_calls
from ava_orchestrator.core.agent import Agent
from ava_orchestrator.core.event_bus import EventBus
from ava_orchestrator.core.tool import ToolExecutionOptions, Toolkit
from ava_orchestrator.models.enums import AgentType, ObserverState, ResultStatus
from ava_orchestrator.models.messages import (
    AgentResultPayload,
    create_result_payload,
    dispatch_channel,
    reply_channel,
)
from ava_orchestrator.services.interfaces import (
    LicensingClient,
    MarketDataProvider,
    StorageClient,
    TextGenerator,
)
from ava_orchestrator.utils.exceptions import AllToolsFailedError, ConfigurationError
from ava_orchestrator.utils.logger import get_logger
from ava_orchestrator.utils.prompt_builder import PromptBuilder

logger = get_logger(__name__)

FINISHED_STATES_KEPT = 256
TASK_ARGUMENT_FIELDS = ("task", "query")


class ObserverAgent(Agent):
    """
    Agent that observes the market and the wallet on behalf of a task.

    Usage:
        observer = ObserverAgent(bus, market_data, llm=llm, storage=storage, address="0xabc")
        observer.start()
        bus.emit("task-manager-observer", {"taskId": "T1", "task": "check AVAX sentiment"})
    """

    def __init__(
        self,
        event_bus: EventBus,
        market_data: Optional[MarketDataProvider] = None,
        llm: Optional[TextGenerator] = None,
        storage: Optional[StorageClient] = None,
        licensing: Optional[LicensingClient] = None,
        address: Optional[str] = None,
        name: str = AgentType.OBSERVER.value,
        toolkit: Optional[Toolkit] = None
    ):
        super().__init__(name, event_bus, llm=llm, storage=storage, licensing=licensing)
        if toolkit is None:
            if market_data is None:
                raise ConfigurationError("market_data", "ObserverAgent needs a market data provider or a toolkit")
            toolkit = build_observer_toolkit(market_data, address)
        self.address = address
        self.toolkit = toolkit
        self._states: Dict[str, ObserverState] = {}
        self._finished: "OrderedDict[str, ObserverState]" = OrderedDict()

    def channels(self) -> List[str]:
        return [dispatch_channel(self.name)]

    def state_of(self, task_id: str) -> ObserverState:
        if task_id in self._states:
            return self._states[task_id]
        return self._finished.get(task_id, ObserverState.IDLE)

    def _finish(self, task_id: str) -> None:
        """Move a task out of the live table; only the latest finished states are kept."""
        state = self._states.pop(task_id, None)
        if state is None:
            return
        self._finished[task_id] = state
        self._finished.move_to_end(task_id)
        while len(self._finished) > FINISHED_STATES_KEPT:
            self._finished.popitem(last=False)

    async def handle_event(self, event: str, data: Any) -> None:
        if event == dispatch_channel(self.name):
            await self.handle_task_manager_event(data)
        else:
            logger.warning(f"[{self.name}] Unhandled event: {event}")

    async def handle_task_manager_event(self, data: Dict[str, Any]) -> None:
        task_id = data.get("taskId")
        task = data.get("task")
        if not task_id or not task:
            logger.error(f"[{self.name}] Invalid task data: missing taskId or task ({data})")
            self.emit_error("Invalid task data: missing taskId or task", task_id)
            return

        logger.info(f"[{self.name}] received task {task_id}: {task}")
        self.emit_action(f"Analyzing task: {task}", task_id)

        try:
            payload = await self.observe(task_id, task)
        except AllToolsFailedError as e:
            logger.error(f"[{self.name}] {e.message}")
            self._states[task_id] = ObserverState.PARTIAL_FAILED
            payload = create_result_payload(
                task_id,
                ResultStatus.PARTIAL.value,
                result=None,
                tool_results=e.tool_results,
                partial_data=True,
                error=e.message
            )
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"[{self.name}] Failed to analyze task {task_id}: {message}")
            self._states[task_id] = ObserverState.PARTIAL_FAILED
            self.emit_error(f"Failed to analyze task: {message}", task_id)
            payload = create_result_payload(task_id, ResultStatus.FAILED.value, result=message, error=message)

        try:
            self.emit(reply_channel(self.name), payload)
        finally:
            self._finish(task_id)

    def tool_calls(self, task: str) -> List[Tuple[str, Dict[str, Any]]]:
        """
        One (tool name, arguments) pair per tool in the toolkit.

        Known tools use their default arguments. Any other tool gets the task
        text in whichever of its fields is named ``task`` or ``query``.
        """
        defaults = dict(default_tool_calls(task))
        calls = []
        for t in self.toolkit:
            if t.name in defaults:
                calls.append((t.name, defaults[t.name]))
            else:
                fields = t.parameters.model_fields
                calls.append((t.name, {f: task for f in TASK_ARGUMENT_FIELDS if f in fields}))
        return calls

    async def run_tools(self, task: str) -> List[Dict[str, Any]]:
        """
        Run every observation tool for ``task``.

        Each call is isolated: a failure becomes an ``error`` outcome and the
        other calls still run.
        """
        calls = self.tool_calls(task)

        async def run_one(name: str, args: Dict[str, Any]) -> Dict[str, Any]:
            result = await self.toolkit[name].execute(args, ToolExecutionOptions())
            if result.success:
                return {"tool": name, "status": "success", "result": result.result}
            return {"tool": name, "status": "error", "error": result.error}

        return list(await asyncio.gather(*(run_one(name, args) for name, args in calls)))

    async def observe(self, task_id: str, task: str) -> AgentResultPayload:
        """Gather signals for one task and build the result payload."""
        self._states[task_id] = ObserverState.RUNNING_TOOLS
        outcomes = await self.run_tools(task)

        failures = [o for o in outcomes if o["status"] == "error"]
        if not outcomes or len(failures) == len(outcomes):
            raise AllToolsFailedError(task_id, outcomes)
        if failures:
            logger.warning(
                f"[{self.name}] {len(failures)}/{len(outcomes)} tools failed for task {task_id}: "
                f"{', '.join(f['tool'] for f in failures)}"
            )

        if self.llm is None:
            raise ConfigurationError("llm", f"Agent '{self.name}' has no text generator")

        self._states[task_id] = ObserverState.SYNTHESIZING
        generation = await self.llm.generate_text(
            PromptBuilder.build_observer_context(task, outcomes),
            PromptBuilder.observer_system_prompt(self.address)
        )

        await self.on_step_finish(generation.text, [o["tool"] for o in outcomes], outcomes)
        self.emit_message(generation.text, "analysis", task_id)

        partial = bool(failures)
        self._states[task_id] = ObserverState.DONE
        return create_result_payload(
            task_id,
            ResultStatus.PARTIAL.value if partial else ResultStatus.COMPLETED.value,
            result=generation.text,
            tool_results=outcomes,
            partial_data=partial
        )
