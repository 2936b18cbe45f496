"""
Core module - Event bus, tool contract, agent base and task router

``register_agents`` lives in ``ava_orchestrator.core.setup`` and is not
imported here, because it depends on the agents package, which depends on
this one.
"""

from .event_bus import EventBus, EventSubscription, get_event_bus, reset_event_bus
from .tool import NoArguments, Tool, ToolExecutionOptions, ToolResult, Toolkit, tool
from .agent import Agent
from .router import RoutingDecision, TaskCategory, TaskRouter

__all__ = [
    'EventBus',
    'EventSubscription',
    'get_event_bus',
    'reset_event_bus',
    'NoArguments',
    'Tool',
    'ToolExecutionOptions',
    'ToolResult',
    'Toolkit',
    'tool',
    'Agent',
    'RoutingDecision',
    'TaskCategory',
    'TaskRouter',
]
