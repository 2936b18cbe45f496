"""
Services module - Collaborator interfaces and their concrete adapters
"""

from .interfaces import (
    TextGenerationResult,
    TextGenerator,
    StorageClient,
    TaskRepository,
    LicensingClient,
    TransactionPlanner,
    ChainClient,
    MarketDataProvider,
)
from .licensing import InMemoryLicensingClient, HTTPLicensingClient, create_licensing_client
from .llm_client import LLMClient
from .transaction_planner import BrianTransactionPlanner, format_units

__all__ = [
    'TextGenerationResult',
    'TextGenerator',
    'StorageClient',
    'TaskRepository',
    'LicensingClient',
    'TransactionPlanner',
    'ChainClient',
    'MarketDataProvider',
    'InMemoryLicensingClient',
    'HTTPLicensingClient',
    'create_licensing_client',
    'LLMClient',
    'BrianTransactionPlanner',
    'format_units',
]
