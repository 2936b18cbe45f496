"""
Tests for the executor agent and its simulate / plan / execute pipeline.
"""

import pytest

from ava_orchestrator.agents.executor import ExecutorAgent, build_executor_toolkit
from ava_orchestrator.core.tool import Tool
from ava_orchestrator.models.transaction import TransactionRecord, TransactionStep
from ava_orchestrator.utils.exceptions import ConfigurationError
from tests.conftest import FakeChainClient, FakePlanner, FakeTextGenerator

TASK = "swap 10 AVAX to USDC"


def make_executor(bus, storage, planner=None, chain=None, llm=None):
    executor = ExecutorAgent(
        bus,
        storage=storage,
        planner=planner or FakePlanner(),
        chain=chain or FakeChainClient(),
        llm=llm,
    )
    executor.start()
    return executor


async def dispatch(bus, task_id="T1", task=TASK):
    bus.emit("task-manager-executor", {"taskId": task_id, "task": task})
    await bus.join()


class TestExecutorPipeline:

    def test_requires_collaborators(self, bus, storage):
        with pytest.raises(ConfigurationError):
            ExecutorAgent(bus, storage=storage)

    @pytest.mark.asyncio
    async def test_successful_run(self, bus, recorder, storage):
        chain = FakeChainClient()
        planner = FakePlanner(steps=2)
        make_executor(bus, storage, planner, chain)

        await dispatch(bus)

        [result] = recorder.on("executor-task-manager")
        assert result["status"] == "completed"
        assert result["result"]["hashes"] == ["0xhash1", "0xhash2"]
        assert [o["tool"] for o in result["toolResults"]] == ["simulateTasks", "getTransactionData", "executeTransaction"]
        assert all(o["success"] for o in result["toolResults"])

        assert [s["to"] for s in chain.sent] == ["0xrouter0", "0xrouter1"]
        assert planner.calls[0] == {"prompt": TASK, "chain_id": 43114, "address": chain.address}
        assert await storage.keys("transaction:") == []

        types = [m["collaborationType"] for m in recorder.on("agent-message")]
        assert types == ["simulation", "transaction-data", "execution"]
        assert recorder.on("agent-message")[-1]["content"] == (
            'Transaction executed successfully for task: "swap 10 AVAX to USDC". '
            "Transaction hashes: 0xhash1, 0xhash2"
        )
        assert recorder.on("agent-action")[0]["action"] == "Starting execution of task: T1 (Type: defi_execution)"

    @pytest.mark.asyncio
    async def test_simulation_failure_stops_pipeline(self, bus, recorder, storage):
        """Test that neither planning nor execution runs after a failed simulation."""
        planner = FakePlanner()
        chain = FakeChainClient()
        toolkit = build_executor_toolkit(storage, planner, chain, 43114)

        async def broken_simulation(args, options):
            raise RuntimeError("simulation backend unavailable")

        toolkit.replace(Tool("simulateTasks", "fails", broken_simulation))
        ExecutorAgent(bus, toolkit=toolkit).start()

        await dispatch(bus)

        [result] = recorder.on("executor-task-manager")
        assert result["status"] == "failed"
        assert result["error"] == "simulation backend unavailable"
        assert [o["tool"] for o in result["toolResults"]] == ["simulateTasks"]
        assert planner.calls == []
        assert chain.sent == []

    @pytest.mark.asyncio
    async def test_planning_failure_stops_pipeline(self, bus, recorder, storage):
        """Test that executeTransaction is never reached when planning fails."""
        chain = FakeChainClient()
        make_executor(bus, storage, FakePlanner(fail_on="AVAX"), chain)

        await dispatch(bus)

        [result] = recorder.on("executor-task-manager")
        assert result["status"] == "failed"
        assert result["error"].startswith("Some transactions failed to fetch")
        assert [o["tool"] for o in result["toolResults"]] == ["simulateTasks", "getTransactionData"]
        assert chain.sent == []
        assert await storage.keys("transaction:") == []
        assert recorder.on("agent-message")[-1]["collaborationType"] == "error"
        assert recorder.on("agent-action")[-1]["action"] == "Failed to execute task: T1"

    @pytest.mark.asyncio
    async def test_mid_plan_failure_is_not_rolled_back(self, bus, recorder, storage):
        """Test that step 1 stays sent, step 3 never runs and the plan is kept."""
        chain = FakeChainClient(fail_on=2)
        make_executor(bus, storage, FakePlanner(steps=3), chain)

        await dispatch(bus)

        [result] = recorder.on("executor-task-manager")
        assert result["status"] == "failed"
        assert result["error"] == "Transaction step 2 failed for task T1: insufficient funds for gas"
        execution = result["toolResults"][-1]
        assert execution["tool"] == "executeTransaction"
        assert execution["result"]["hashes"] == ["0xhash1"]
        assert execution["result"]["step_index"] == 1
        assert len(chain.sent) == 1
        assert await storage.keys("transaction:") == ["transaction:T1"]

    @pytest.mark.asyncio
    async def test_reverted_receipt_fails(self, bus, recorder, storage):
        make_executor(bus, storage, FakePlanner(steps=2), FakeChainClient(revert_on=1))

        await dispatch(bus)

        [result] = recorder.on("executor-task-manager")
        assert result["status"] == "failed"
        assert "0xhash1 was reverted" in result["error"]
        assert result["toolResults"][-1]["result"]["hashes"] == []

    @pytest.mark.asyncio
    async def test_simulation_reports_pending_plans(self, bus, recorder, storage):
        pending = TransactionRecord(
            task_id="T0", task="bridge 5 USDC", steps=[TransactionStep(to="0xbridge")],
            from_token="USDC", to_token="USDC", from_amount="5",
        )
        await storage.store(pending.key, pending.to_dict())
        llm = FakeTextGenerator(text="Bridge first, then swap.")
        make_executor(bus, storage, llm=llm)

        await dispatch(bus)

        assert '[taskId: T0] "bridge 5 USDC"' in llm.calls[0]["prompt"]
        assert recorder.on("agent-message")[0]["content"] == "DeFi Task Simulation:\nBridge first, then swap."
        assert await storage.keys("transaction:") == ["transaction:T0"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("task, message", [
        ("check AVAX price", "Task requires observation. Routing to observer."),
        ("write a weekly report", "Task requires analysis. Routing back to task manager."),
        ("tell me a joke", "Task type unclear. Please clarify the required action."),
    ])
    async def test_non_defi_task_is_sent_back(self, bus, recorder, storage, task, message):
        planner = FakePlanner()
        chain = FakeChainClient()
        make_executor(bus, storage, planner, chain)

        await dispatch(bus, task=task)

        [result] = recorder.on("executor-task-manager")
        assert result["status"] == "routing"
        assert result["result"] == message
        assert result["toolResults"] == []
        assert planner.calls == []
        assert chain.sent == []

    @pytest.mark.asyncio
    async def test_plain_text_simulation_result(self, bus, recorder, storage):
        toolkit = build_executor_toolkit(storage, FakePlanner(), FakeChainClient(), 43114)

        async def text_simulation(args, options):
            return "Swap looks safe."

        toolkit.replace(Tool("simulateTasks", "returns text", text_simulation))
        ExecutorAgent(bus, toolkit=toolkit).start()

        await dispatch(bus)

        [result] = recorder.on("executor-task-manager")
        assert result["status"] == "completed"
        assert recorder.on("agent-message")[0]["content"] == "DeFi Task Simulation:\nSwap looks safe."

    @pytest.mark.asyncio
    async def test_invalid_dispatch(self, bus, recorder, storage):
        make_executor(bus, storage)
        bus.emit("task-manager-executor", {"taskId": "T1", "task": ""})
        await bus.join()

        assert recorder.on("executor-task-manager") == []
        assert recorder.on("agent-error")[0]["taskId"] == "T1"


class TestExecutorToolkit:

    def setup_method(self):
        self.chain = FakeChainClient()

    @pytest.mark.asyncio
    async def test_execute_without_plan(self, storage):
        toolkit = build_executor_toolkit(storage, FakePlanner(), self.chain, 43114)
        result = await toolkit["executeTransaction"].execute({"task": TASK, "taskId": "nope"})
        assert result.success is False
        assert result.error == 'Transaction not found for task: "swap 10 AVAX to USDC" [id: nope].'

    @pytest.mark.asyncio
    async def test_replanning_keeps_created_at(self, storage):
        toolkit = build_executor_toolkit(storage, FakePlanner(steps=1), self.chain, 43114)
        first = await toolkit["getTransactionData"].execute({"tasks": [{"task": TASK, "taskId": "T1"}]})
        second = await toolkit["getTransactionData"].execute({"tasks": [{"task": "swap 20 AVAX", "taskId": "T1"}]})

        assert first.result[0]["createdAt"] == second.result[0]["createdAt"]
        stored = await storage.retrieve("transaction:T1")
        assert stored["data"]["task"] == "swap 20 AVAX"

    @pytest.mark.asyncio
    async def test_generated_task_id(self, storage):
        toolkit = build_executor_toolkit(storage, FakePlanner(), self.chain, 43114)
        result = await toolkit["getTransactionData"].execute({"tasks": [{"task": TASK}]})
        task_id = result.result[0]["taskId"]
        assert await storage.keys("transaction:") == [f"transaction:{task_id}"]

    @pytest.mark.asyncio
    async def test_empty_task_list_rejected(self, storage):
        toolkit = build_executor_toolkit(storage, FakePlanner(), self.chain, 43114)
        result = await toolkit["getTransactionData"].execute({"tasks": []})
        assert result.success is False
