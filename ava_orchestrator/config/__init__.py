"""
Configuration module - Settings and configuration management
"""

from .agent_config import (
    OrchestratorConfig,
    LLMConfig,
    LLMProvider,
    ChainConfig,
    StorageConfig,
    LicensingConfig,
)
from .env_config import EnvConfig

__all__ = [
    'OrchestratorConfig',
    'LLMConfig',
    'LLMProvider',
    'ChainConfig',
    'StorageConfig',
    'LicensingConfig',
    'EnvConfig',
]
