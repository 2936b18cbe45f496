"""
Utilities module - Helper functions and utilities
"""

from .logger import get_logger
from .prompt_builder import PromptBuilder
from .validation import ValidationResult, validate_channel_payload

# Exception hierarchy
from .exceptions import (
    OrchestratorError,
    ConfigurationError,
    MissingDependencyError,
    ValidationError,
    InvalidParameterError,
    SchemaValidationError,
    ExecutionError,
    AgentExecutionError,
    ToolExecutionError,
    AllToolsFailedError,
    TransactionExecutionError,
    TransactionPlanningError,
    RoutingError,
    LLMError,
    TaskError,
    TaskNotFoundError,
    InvalidTransitionError,
    ResourceError,
    StorageError,
    LicensingError,
    NetworkError,
    wrap_exception,
)

__all__ = [
    'get_logger',
    'PromptBuilder',
    'ValidationResult',
    'validate_channel_payload',
    'OrchestratorError',
    'ConfigurationError',
    'MissingDependencyError',
    'ValidationError',
    'InvalidParameterError',
    'SchemaValidationError',
    'ExecutionError',
    'AgentExecutionError',
    'ToolExecutionError',
    'AllToolsFailedError',
    'TransactionExecutionError',
    'TransactionPlanningError',
    'RoutingError',
    'LLMError',
    'TaskError',
    'TaskNotFoundError',
    'InvalidTransitionError',
    'ResourceError',
    'StorageError',
    'LicensingError',
    'NetworkError',
    'wrap_exception',
]
