"""
AVA Orchestrator - Multi-agent task orchestration for a crypto-portfolio assistant

Three agents cooperate over an in-process event bus:

- Observer: gathers market, wallet and social signals and writes an analysis
- Task manager: owns the task lifecycle, routes tasks and licenses every result
- Executor: simulates, plans and executes on-chain transactions

Installation:
pip install -e .            # core
pip install -e ".[all]"     # every LLM provider

Configuration:
    Create a .env file:

    ANTHROPIC_API_KEY=sk-ant-...
    AGENT_LLM_PROVIDER=anthropic
    AGENT_STORAGE_BACKEND=memory
    BRIAN_API_KEY=...

Example:
    >>> from ava_orchestrator import OrchestratorConfig, register_agents
    >>>
    >>> config = OrchestratorConfig.from_env()
    >>> agents = register_agents(config, chain_client=chain, market_data=market)
    >>> task_id = await agents.task_manager.process_task("swap 10 AVAX to USDC")
    >>> await agents.event_bus.join()
    >>> task = await agents.task_manager.get_task(task_id)
"""

__version__ = "1.0.0"
__all__ = [
    'EventBus',
    'Agent',
    'TaskRouter',
    'ObserverAgent',
    'TaskManagerAgent',
    'ExecutorAgent',
    'register_agents',
    'RegisteredAgents',
    'OrchestratorConfig',
    'EnvConfig',
    'Task',
    'TaskStatus',
]

from ava_orchestrator.core import EventBus, Agent, TaskRouter
from ava_orchestrator.agents import ObserverAgent, TaskManagerAgent, ExecutorAgent
from ava_orchestrator.core.setup import register_agents, RegisteredAgents
from ava_orchestrator.config import OrchestratorConfig, EnvConfig
from ava_orchestrator.models import Task, TaskStatus
