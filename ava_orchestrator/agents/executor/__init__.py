"""
Executor agent package
"""

from .agent import ExecutorAgent, StageFailed
from .toolkit import build_executor_toolkit

__all__ = ['ExecutorAgent', 'StageFailed', 'build_executor_toolkit']
