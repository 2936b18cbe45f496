"""
Agents module - Observer, task manager and executor
"""

from .observer import ObserverAgent
from .task_manager import TaskManagerAgent
from .executor import ExecutorAgent

__all__ = [
    'ObserverAgent',
    'TaskManagerAgent',
    'ExecutorAgent',
]
