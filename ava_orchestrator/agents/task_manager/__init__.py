"""
Task manager agent package
"""

from .agent import TaskManagerAgent
from .toolkit import build_task_manager_toolkit

__all__ = ['TaskManagerAgent', 'build_task_manager_toolkit']
