"""
Executor toolkit - Simulate, plan and execute on-chain transactions

Transaction plans live in storage under ``transaction:<task id>`` between
planning and execution. Execution is sequential and not atomic: a failed
step stops the run, already confirmed steps stay on chain and their hashes
are reported, and the plan is kept so it can be inspected.
"""

import asyncio
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ava_orchestrator.core.tool import NoArguments, Tool, ToolExecutionOptions, ToolResult, Toolkit
from ava_orchestrator.models.transaction import (
    TRANSACTION_KEY_PREFIX,
    TransactionRecord,
    transaction_key,
)
from ava_orchestrator.services.interfaces import (
    ChainClient,
    StorageClient,
    TextGenerator,
    TransactionPlanner,
)
from ava_orchestrator.utils.exceptions import StorageError, TransactionExecutionError
from ava_orchestrator.utils.logger import get_logger
from ava_orchestrator.utils.prompt_builder import PromptBuilder

logger = get_logger(__name__)

RECEIPT_SUCCESS = "success"


class TransactionTask(BaseModel):
    task: str = Field(..., min_length=1)
    taskId: Optional[str] = None


class GetTransactionDataArgs(BaseModel):
    tasks: List[TransactionTask] = Field(..., min_length=1)


class ExecuteTransactionArgs(BaseModel):
    task: str
    taskId: str = Field(..., min_length=1)


async def _load_record(storage: StorageClient, task_id: str) -> Optional[TransactionRecord]:
    try:
        document = await storage.retrieve(transaction_key(task_id))
    except StorageError:
        return None
    return TransactionRecord.from_dict(document["data"])


def build_executor_toolkit(
    storage: StorageClient,
    planner: TransactionPlanner,
    chain: ChainClient,
    chain_id: int,
    llm: Optional[TextGenerator] = None
) -> Toolkit:
    """
    Build the executor's three stage tools.

    Args:
        storage: Where transaction plans are kept between stages
        planner: Turns natural-language instructions into transaction plans
        chain: Sends transactions and waits for receipts
        chain_id: Chain the plans are built for
        llm: Optional text generator asked for advice on the simulation
    """

    async def simulate_tasks(args: NoArguments, options: ToolExecutionOptions) -> Dict[str, Any]:
        keys = await storage.keys(TRANSACTION_KEY_PREFIX)
        logger.info(f"[simulateTasks] simulating {len(keys)} pending transaction(s)")

        simulations = []
        for key in keys:
            task_id = key[len(TRANSACTION_KEY_PREFIX):]
            record = await _load_record(storage, task_id)
            if record is None or not record.steps:
                simulations.append(f"Transaction not found for task [id: {task_id}].")
            else:
                simulations.append(record.describe())

        advice = None
        if llm is not None and simulations:
            advice = (await llm.generate_text(PromptBuilder.build_simulation_prompt(simulations))).text

        return {"simulations": simulations, "advice": advice}

    async def get_transaction_data(args: GetTransactionDataArgs, options: ToolExecutionOptions) -> Any:
        logger.info(f"[getTransactionData] planning {len(args.tasks)} task(s)")
        plans = await asyncio.gather(
            *(planner.plan(entry.task, chain_id, chain.address) for entry in args.tasks),
            return_exceptions=True
        )

        failures = [
            f'"{entry.task}": {plan}' for entry, plan in zip(args.tasks, plans) if isinstance(plan, Exception)
        ]
        if failures:
            logger.error(f"[getTransactionData] {len(failures)} of {len(args.tasks)} plan(s) failed")
            return ToolResult.fail(
                "Some transactions failed to fetch, please rewrite the tasks. " + "; ".join(failures)
            )

        saved = []
        for entry, plan in zip(args.tasks, plans):
            task_id = entry.taskId or str(uuid.uuid4())
            record = await _load_record(storage, task_id)
            if record is None:
                record = TransactionRecord(task_id=task_id, task=entry.task)
            else:
                record.task = entry.task
            record.apply_plan(plan)
            await storage.store(record.key, record.to_dict(), metadata={"kind": "transaction"})
            saved.append({"taskId": record.task_id, "task": record.task, "createdAt": record.created_at})

        logger.info("[getTransactionData] transactions fetched correctly.")
        return saved

    async def execute_transaction(args: ExecuteTransactionArgs, options: ToolExecutionOptions) -> Any:
        logger.info(f"[executeTransaction] executing transaction with task id: {args.taskId}")
        record = await _load_record(storage, args.taskId)
        if record is None:
            return ToolResult.fail(f'Transaction not found for task: "{args.task}" [id: {args.taskId}].')

        hashes: List[str] = []
        for index, step in enumerate(record.steps):
            try:
                tx_hash = await chain.send_transaction(step.to, int(step.value), step.data)
                logger.info(f"[executeTransaction] transaction hash: {tx_hash}")
                receipt = await chain.wait_for_transaction_receipt(tx_hash)
            except Exception as e:
                raise TransactionExecutionError(args.taskId, index, str(e), hashes, e)

            if receipt.get("status", RECEIPT_SUCCESS) != RECEIPT_SUCCESS:
                raise TransactionExecutionError(
                    args.taskId, index, f"transaction {tx_hash} was {receipt.get('status')}", hashes
                )
            hashes.append(receipt.get("transactionHash", tx_hash))

        await storage.delete(record.key)
        return {
            "message": f'Transaction executed successfully for task: "{args.task}". '
                       f'Transaction hashes: {", ".join(hashes)}',
            "hashes": hashes,
        }

    return Toolkit([
        Tool("simulateTasks",
             "Simulates the output of every pending transaction. Always use it before executeTransaction.",
             simulate_tasks),
        Tool("getTransactionData", "Transforms tasks into transactions.",
             get_transaction_data, GetTransactionDataArgs),
        Tool("executeTransaction", "Executes a transaction. Execute transactions in chronological order.",
             execute_transaction, ExecuteTransactionArgs),
    ])
