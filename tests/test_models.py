"""
Tests for the task model, transaction records and payload validation.
"""

import pytest

from ava_orchestrator.models.enums import TaskStatus
from ava_orchestrator.models.messages import (
    AgentResultPayload,
    TaskDispatchPayload,
    create_agent_action,
    create_result_payload,
    payload_type_for,
)
from ava_orchestrator.models.task import Task, can_transition
from ava_orchestrator.models.transaction import TransactionPlan, TransactionRecord, TransactionStep
from ava_orchestrator.utils.exceptions import (
    AgentExecutionError,
    InvalidParameterError,
    InvalidTransitionError,
    wrap_exception,
)
from ava_orchestrator.utils.validation import validate_channel_payload


class TestTaskLifecycle:

    def test_new_task_is_pending(self):
        task = Task(description="check AVAX")
        assert task.status == TaskStatus.PENDING
        assert task.result is None
        assert task.license_id is None

    @pytest.mark.parametrize("current, target, allowed", [
        (TaskStatus.PENDING, TaskStatus.IN_PROGRESS, True),
        (TaskStatus.PENDING, TaskStatus.COMPLETED, False),
        (TaskStatus.IN_PROGRESS, TaskStatus.IN_PROGRESS, True),
        (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED, True),
        (TaskStatus.COMPLETED, TaskStatus.FAILED, False),
        (TaskStatus.FAILED, TaskStatus.IN_PROGRESS, False),
    ])
    def test_transitions(self, current, target, allowed):
        assert can_transition(current, target) is allowed

    def test_terminal_states_are_final(self):
        task = Task(description="x", status=TaskStatus.COMPLETED)
        with pytest.raises(InvalidTransitionError) as exc_info:
            task.transition(TaskStatus.IN_PROGRESS)
        assert exc_info.value.current_status == "completed"

    def test_dict_round_trip_keeps_status(self):
        task = Task(description="x")
        task.transition(TaskStatus.IN_PROGRESS)
        task.assigned_to = "observer"
        restored = Task.from_dict(task.to_dict())
        assert restored.status == TaskStatus.IN_PROGRESS
        assert restored.assigned_to == "observer"


class TestTransactionRecord:

    def test_apply_plan_and_describe(self):
        record = TransactionRecord(task_id="T1", task="swap 10 AVAX to USDC")
        created = record.created_at
        record.apply_plan(TransactionPlan(
            steps=[TransactionStep(to="0xrouter", value="10")],
            from_token="AVAX", to_token="USDC", from_amount="10", to_amount="350.5", from_amount_usd="352",
        ))

        assert record.created_at == created
        assert record.describe().splitlines() == [
            '[taskId: T1] "swap 10 AVAX to USDC"',
            "The transaction is from AVAX to USDC.",
            "The amount is 10 AVAX ($352) for at least 350.5 USDC.",
            "It has 1 on-chain step(s).",
        ]
        assert TransactionRecord.from_dict(record.to_dict()).steps[0].value == "10"


class TestExceptions:

    def test_wrap_keeps_orchestrator_errors(self):
        error = InvalidTransitionError("T1", "completed", "failed")
        assert wrap_exception(error, "assign") is error

    def test_wrap_generic_error(self):
        wrapped = wrap_exception(RuntimeError("boom"), "handle observer-task-manager",
                                 {"agent_name": "task-manager", "task_id": "T1"})
        assert isinstance(wrapped, AgentExecutionError)
        assert wrapped.to_dict()["details"]["task_id"] == "T1"
        assert wrapped.message.startswith("[task-manager]")

    def test_wrap_value_error(self):
        assert isinstance(wrap_exception(ValueError("bad"), "parse"), InvalidParameterError)


class TestPayloadValidation:

    def test_channel_types(self):
        assert payload_type_for("task-manager-cookie") is TaskDispatchPayload
        assert payload_type_for("cookie-task-manager") is AgentResultPayload
        assert payload_type_for("somewhere-else") is None

    def test_valid_result(self):
        payload = create_result_payload("T1", "partial", result=None, tool_results=[], partial_data=True)
        assert validate_channel_payload("observer-task-manager", payload)

    def test_missing_fields(self):
        result = validate_channel_payload("task-manager-executor", {"task": "swap"})
        assert not result
        assert "taskId" in str(result)

    def test_bad_tool_results_and_timestamp(self):
        result = validate_channel_payload("executor-task-manager", {
            "taskId": "T1", "status": "completed", "toolResults": "none", "timestamp": "yesterday",
        })
        assert len(result.errors) == 2

    def test_broadcast_without_task_id(self):
        assert validate_channel_payload("agent-action", create_agent_action("observer", "Stopping"))
