"""
Task manager agent - Owns the task table, dispatches work and records results

The task manager is the only writer of Task records. It creates tasks,
routes and dispatches them to the observer, the executor or an external
agent, and turns every reply into a licensed, persisted result plus a
``task-update`` broadcast.

Task lifecycle:
    pending -> in_progress -> completed | failed

Results for unknown tasks, or for tasks that are no longer in progress, are
logged and dropped; they never raise into the bus.
"""

from typing import Any, Dict, List, Optional

from ava_orchestrator.agents.task_manager.toolkit import build_task_manager_toolkit
from ava_orchestrator.core.agent import Agent
from ava_orchestrator.core.event_bus import EventBus
from ava_orchestrator.core.router import TaskRouter
from ava_orchestrator.core.tool import ToolExecutionOptions, Toolkit
from ava_orchestrator.models.enums import AgentType, ResultStatus, TaskStatus
from ava_orchestrator.models.licensing import IPMetadata, result_license_terms
from ava_orchestrator.models.messages import (
    Channel,
    create_dispatch_payload,
    create_task_update,
    dispatch_channel,
    reply_channel,
)
from ava_orchestrator.models.task import Task
from ava_orchestrator.services.interfaces import (
    LicensingClient,
    StorageClient,
    TaskRepository,
    TextGenerator,
)
from ava_orchestrator.utils.exceptions import (
    ConfigurationError,
    InvalidParameterError,
    TaskNotFoundError,
)
from ava_orchestrator.utils.logger import get_logger
from ava_orchestrator.utils.prompt_builder import PromptBuilder

logger = get_logger(__name__)

ASSIGNABLE_AGENTS = (AgentType.OBSERVER.value, AgentType.EXECUTOR.value)


class TaskManagerAgent(Agent):
    """
    Agent owning the task lifecycle.

    Attributes:
        repository: Task table
        router: Classifier deciding where a task goes
        toolkit: Messaging tools used by ``process_analysis``

    Usage:
        manager = TaskManagerAgent(bus, InMemoryTaskRepository(), llm=llm,
                                   storage=storage, licensing=licensing)
        manager.start()
        task_id = await manager.create_task("swap 10 AVAX to USDC")
        await manager.assign_task(task_id, "executor")
    """

    def __init__(
        self,
        event_bus: EventBus,
        repository: TaskRepository,
        llm: Optional[TextGenerator] = None,
        storage: Optional[StorageClient] = None,
        licensing: Optional[LicensingClient] = None,
        router: Optional[TaskRouter] = None,
        name: str = AgentType.TASK_MANAGER.value,
        observer_name: str = AgentType.OBSERVER.value,
        executor_name: str = AgentType.EXECUTOR.value,
        toolkit: Optional[Toolkit] = None
    ):
        super().__init__(name, event_bus, llm=llm, storage=storage, licensing=licensing)
        self.repository = repository
        self.router = router or TaskRouter()
        self.observer_name = observer_name
        self.executor_name = executor_name
        self.toolkit = toolkit or build_task_manager_toolkit(event_bus)

    def channels(self) -> List[str]:
        channels = [reply_channel(self.observer_name), reply_channel(self.executor_name)]
        channels.extend(reply_channel(agent) for agent in self.router.external_agents)
        return channels

    async def handle_event(self, event: str, data: Any) -> None:
        logger.info(f"[{self.name}] received data from [{event}]")
        if event == reply_channel(self.observer_name):
            await self.handle_observer_result(data)
        elif event == reply_channel(self.executor_name):
            await self.handle_executor_result(data)
        else:
            for agent in self.router.external_agents:
                if event == reply_channel(agent):
                    await self.handle_external_result(agent, data)
                    return
            logger.warning(f"[{self.name}] Unhandled event: {event}")

    # ------------------------------------------------------------------
    # Task table
    # ------------------------------------------------------------------

    async def create_task(self, description: str) -> str:
        if not description or not description.strip():
            raise InvalidParameterError("description", "Task description must not be empty")

        task = Task(description=description)
        await self.repository.save(task)
        await self._persist_task(task)

        logger.info(f"[{self.name}] Created new task: {task.id}")
        self.emit_action(f"Created task: {task.id}", task.id)
        return task.id

    async def get_task(self, task_id: str) -> Optional[Task]:
        return await self.repository.get(task_id)

    async def list_tasks(self) -> List[Task]:
        return await self.repository.list()

    async def _require_task(self, task_id: str) -> Task:
        task = await self.repository.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def _persist_task(self, task: Task) -> None:
        if self.storage is not None:
            await self.storage.store(self.storage_key("task", task.id), task.to_dict())

    async def _save(self, task: Task) -> None:
        # The repository is written last so a failed persist leaves the old state in place.
        await self._persist_task(task)
        await self.repository.save(task)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def assign_task(self, task_id: str, agent_type: str) -> None:
        """
        Dispatch a task to the observer or the executor.

        Re-assigning an in-progress task to the same agent re-emits an
        equivalent payload and leaves the task id unchanged.

        Raises:
            TaskNotFoundError: If the task does not exist
            InvalidParameterError: If ``agent_type`` is not observer or executor
            InvalidTransitionError: If the task is already completed or failed
        """
        agent_type = getattr(agent_type, "value", agent_type)
        if agent_type not in ASSIGNABLE_AGENTS:
            raise InvalidParameterError(
                "agent_type", f"must be one of {', '.join(ASSIGNABLE_AGENTS)}", actual_value=agent_type
            )
        agent = self.observer_name if agent_type == AgentType.OBSERVER.value else self.executor_name

        task = await self._require_task(task_id)
        task.transition(TaskStatus.IN_PROGRESS)
        task.assigned_to = agent_type
        await self._save(task)

        logger.info(f"[{self.name}] Assigned task {task_id} to {agent}")
        self.emit_action(f"Forwarding task to {agent}: {task_id}", task_id)
        self.emit(dispatch_channel(agent), create_dispatch_payload(task.id, task.description))

    async def process_task(self, description: str) -> str:
        """
        Create a task and send it where the router says.

        Internal routes are assigned and then analysed when a text generator
        is configured; external routes are forwarded by ``process_analysis``.
        """
        task_id = await self.create_task(description)
        self.emit_message(
            "I've created a new task to analyze and process your request.", "task-creation", task_id
        )

        decision = self.router.route(description)
        if not decision.is_external:
            await self.assign_task(task_id, decision.kind.value)
            if self.llm is None:
                return task_id

        await self.process_analysis(await self._require_task(task_id))
        return task_id

    async def process_analysis(self, task: Task) -> str:
        """
        Turn a task into next-step instructions.

        Tasks the router sends to an external agent are forwarded verbatim and
        the method returns right away. Otherwise the messaging tools run and the
        text generator writes the instructions.

        Raises:
            Any failure, after marking the task failed
        """
        try:
            decision = self.router.route(task.description)
            if decision.is_external:
                return await self._forward_external(task, decision.target)

            logger.info(f"[{self.name}] Processing analysis for task: {task.id}")
            tool_results: List[Dict[str, Any]] = []

            observer_result = await self.toolkit["sendMessageToObserver"].execute(
                {"message": task.description, "task_id": task.id},
                ToolExecutionOptions(tool_call_id=f"observer-{task.id}")
            )
            tool_results.append({"tool": "sendMessageToObserver", "result": observer_result.to_dict()})
            if observer_result.success:
                self.emit_message(f"Observer Analysis Request:\n{observer_result.result}", "tool-result", task.id)

            current = await self._require_task(task.id)
            if current.status == TaskStatus.IN_PROGRESS:
                executor_result = await self.toolkit["sendMessageToExecutor"].execute(
                    {"message": task.description, "task_id": task.id},
                    ToolExecutionOptions(tool_call_id=f"executor-{task.id}")
                )
                tool_results.append({"tool": "sendMessageToExecutor", "result": executor_result.to_dict()})
                if executor_result.success:
                    self.emit_message(f"Executor Task Request:\n{executor_result.result}", "tool-result", task.id)

            if self.llm is None:
                raise ConfigurationError("llm", f"Agent '{self.name}' has no text generator")

            response = await self.llm.generate_text(
                PromptBuilder.build_task_analysis_prompt(current.to_dict(), tool_results),
                PromptBuilder.task_manager_system_prompt()
            )
            await self.on_step_finish(
                response.text,
                response.tool_calls or [r["tool"] for r in tool_results],
                tool_results
            )
            self.emit_action(f"Processed analysis for task: {task.id}", task.id)
            self.emit_message(response.text, "analysis", task.id)
            return response.text

        except Exception as e:
            logger.error(f"[{self.name}] Analysis failed for task {task.id}: {e}")
            await self._mark_failed(task.id, str(e) or e.__class__.__name__)
            raise

    async def _forward_external(self, task: Task, agent: str) -> str:
        task = await self._require_task(task.id)
        task.transition(TaskStatus.IN_PROGRESS)
        task.assigned_to = agent
        await self._save(task)

        outcome = await self.toolkit["forwardToAgent"].execute(
            {"agent": agent, "task_id": task.id, "task": task.description},
            ToolExecutionOptions(tool_call_id=f"{agent}-{task.id}")
        )
        if outcome.success:
            self.emit_action(f"Forwarding task to {agent}: {task.id}", task.id)
            return outcome.result

        logger.error(f"[{self.name}] Could not forward task {task.id} to {agent}: {outcome.error}")
        await self._mark_failed(task.id, outcome.error)
        return outcome.error

    async def _mark_failed(self, task_id: str, message: str) -> None:
        task = await self.repository.get(task_id)
        if task is None or task.is_terminal:
            return
        task.transition(TaskStatus.FAILED)
        task.result = message
        await self.repository.save(task)
        self.emit(Channel.TASK_UPDATE, create_task_update(task.id, task.status.value, message, task.license_id))
        try:
            await self._persist_task(task)
        except Exception as e:
            logger.error(f"[{self.name}] Could not persist failed task {task_id}: {e}")
            self.emit_error(f"Could not persist task: {e}", task_id)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    async def handle_observer_result(self, data: Dict[str, Any]) -> None:
        await self._handle_result(data, kind="Observation", key_prefix="observation", producer=self.observer_name)

    async def handle_executor_result(self, data: Dict[str, Any]) -> None:
        await self._handle_result(data, kind="Execution", key_prefix="execution", producer=self.executor_name)

    async def handle_external_result(self, agent: str, data: Dict[str, Any]) -> None:
        await self._handle_result(data, kind="Execution", key_prefix="execution", producer=agent)

    @staticmethod
    def result_status(data: Dict[str, Any]) -> TaskStatus:
        """
        Map a reply status onto the task lifecycle.

        ``partial`` with a result is a usable, degraded result; ``partial``
        without one means nothing could be produced.
        """
        status = data.get("status")
        if status == ResultStatus.COMPLETED.value:
            return TaskStatus.COMPLETED
        if status == ResultStatus.PARTIAL.value:
            return TaskStatus.COMPLETED if data.get("result") is not None else TaskStatus.FAILED
        return TaskStatus.FAILED

    async def _handle_routing(self, task: Task, producer: str, data: Dict[str, Any]) -> None:
        """
        A reply saying the task belongs elsewhere. The task is not licensed
        or finished; an executor-assigned task is handed to the observer.
        """
        message = data.get("result") or f"{producer} sent the task back"
        logger.info(f"[{self.name}] {producer} sent task {task.id} back: {message}")
        self.emit_message(message, "routing", task.id)
        if producer == self.executor_name and task.assigned_to == AgentType.EXECUTOR.value:
            await self.assign_task(task.id, AgentType.OBSERVER.value)

    async def _handle_result(self, data: Dict[str, Any], kind: str, key_prefix: str, producer: str) -> None:
        task_id = data.get("taskId") if isinstance(data, dict) else None
        task = await self.repository.get(task_id) if task_id else None
        if task is None:
            logger.warning(f"[{self.name}] {TaskNotFoundError(str(task_id)).message}; dropping {producer} result")
            return
        if task.status != TaskStatus.IN_PROGRESS:
            logger.warning(
                f"[{self.name}] Task {task_id} is {task.status.value}; dropping late {producer} result"
            )
            return
        if data.get("status") == ResultStatus.ROUTING.value:
            await self._handle_routing(task, producer, data)
            return

        status = self.result_status(data)
        result = data.get("result")
        if result is None:
            result = data.get("error")
        logger.info(f"[{self.name}] {producer} result for task {task_id}: {status.value}")

        try:
            license_id = await self.mint_license(
                result_license_terms(task_id, kind),
                IPMetadata(issuer_id=producer, holder_id=self.name)
            )
        except Exception as e:
            logger.error(f"[{self.name}] License minting failed for task {task_id}: {e}")
            self.emit_error(f"License minting failed: {e}", task_id)
            await self._mark_failed(task_id, f"License minting failed: {e}")
            return

        try:
            if self.storage is not None:
                await self.storage.store(
                    self.storage_key(key_prefix, task_id),
                    {
                        "taskId": task_id,
                        "status": data.get("status"),
                        "result": result,
                        "toolResults": data.get("toolResults"),
                        "partialData": data.get("partialData", False),
                        "licenseId": license_id,
                    },
                    metadata={"agent": producer, "licenseId": license_id}
                )

            task.transition(status)
            task.result = result
            task.license_id = license_id
            await self._save(task)
        except Exception as e:
            logger.error(f"[{self.name}] Recording {producer} result for task {task_id} failed: {e}")
            self.emit_error(f"Recording result failed: {e}", task_id)
            await self._mark_failed(task_id, f"Recording result failed: {e}")
            return

        self.emit(Channel.TASK_UPDATE, create_task_update(task.id, task.status.value, result, license_id))
