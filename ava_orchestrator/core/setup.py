"""
Agent wiring - Builds the three agents on one bus from an OrchestratorConfig

Collaborators that cannot be derived from configuration (the chain client
and the market data provider) are passed in. Everything else falls back to
the backend the configuration selects.
"""

from dataclasses import dataclass
from typing import Optional

from ava_orchestrator.agents.executor.agent import ExecutorAgent
from ava_orchestrator.agents.observer.agent import ObserverAgent
from ava_orchestrator.agents.task_manager.agent import TaskManagerAgent
from ava_orchestrator.config.agent_config import OrchestratorConfig
from ava_orchestrator.core.event_bus import EventBus
from ava_orchestrator.core.router import TaskRouter
from ava_orchestrator.services.interfaces import (
    ChainClient,
    LicensingClient,
    MarketDataProvider,
    StorageClient,
    TaskRepository,
    TextGenerator,
    TransactionPlanner,
)
from ava_orchestrator.services.licensing import create_licensing_client
from ava_orchestrator.services.llm_client import LLMClient
from ava_orchestrator.services.transaction_planner import BrianTransactionPlanner
from ava_orchestrator.storage import create_storage
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RegisteredAgents:
    event_bus: EventBus
    task_manager: TaskManagerAgent
    observer: ObserverAgent
    executor: ExecutorAgent

    def stop(self) -> None:
        for agent in (self.task_manager, self.observer, self.executor):
            agent.stop()


def register_agents(
    config: Optional[OrchestratorConfig] = None,
    event_bus: Optional[EventBus] = None,
    llm: Optional[TextGenerator] = None,
    chain_client: Optional[ChainClient] = None,
    market_data: Optional[MarketDataProvider] = None,
    storage: Optional[StorageClient] = None,
    repository: Optional[TaskRepository] = None,
    licensing: Optional[LicensingClient] = None,
    planner: Optional[TransactionPlanner] = None
) -> RegisteredAgents:
    """
    Create and start the task manager, observer and executor.

    Args:
        config: Orchestrator configuration (default: from environment)
        event_bus: Bus to wire on (default: a new bus)
        llm: Text generator shared by the agents (default: LLMClient from config.llm)
        chain_client: On-chain execution collaborator, required
        market_data: Market data collaborator, required
        storage, repository: Default to the pair selected by config.storage
        licensing: Defaults to the client selected by config.licensing
        planner: Defaults to a BrianTransactionPlanner from config.chain

    Returns:
        RegisteredAgents with every agent already listening
    """
    config = config or OrchestratorConfig.from_env()
    event_bus = event_bus or EventBus(validate_payloads=config.validate_payloads)

    if storage is None or repository is None:
        default_storage, default_repository = create_storage(config.storage)
        storage = storage or default_storage
        repository = repository or default_repository
    licensing = licensing or create_licensing_client(config.licensing)
    llm = llm or LLMClient(config.llm)
    planner = planner or BrianTransactionPlanner.from_config(config.chain)

    address = config.chain.sender_address or getattr(chain_client, "address", None)
    router = TaskRouter(external_agents=config.external_agents)

    task_manager = TaskManagerAgent(
        event_bus, repository, llm=llm, storage=storage, licensing=licensing, router=router
    )
    observer = ObserverAgent(
        event_bus, market_data, llm=llm, storage=storage, licensing=licensing, address=address
    )
    executor = ExecutorAgent(
        event_bus,
        storage=storage,
        planner=planner,
        chain=chain_client,
        chain_id=config.chain.chain_id,
        llm=llm,
        licensing=licensing,
        router=router
    )

    for agent in (task_manager, observer, executor):
        agent.start()

    logger.info(f"[SETUP] Registered agents: {task_manager.name}, {observer.name}, {executor.name}")
    return RegisteredAgents(event_bus, task_manager, observer, executor)
