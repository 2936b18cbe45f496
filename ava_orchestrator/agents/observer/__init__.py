"""
Observer agent package
"""

from .agent import ObserverAgent
from .toolkit import build_observer_toolkit, default_tool_calls

__all__ = ['ObserverAgent', 'build_observer_toolkit', 'default_tool_calls']
