"""
Standardized Exception Hierarchy for the orchestration core

Exception Categories:
- Configuration Errors: Issues with settings, environment, or initialization
- Validation Errors: Tool argument and payload validation failures
- Execution Errors: Tool, synthesis, routing and on-chain failures
- Task Errors: Lookups and lifecycle transitions on the Task table
- Resource Errors: Storage, licensing and network collaborators

Usage:
    from ava_orchestrator.utils.exceptions import (
        OrchestratorError,
        TaskNotFoundError,
        TransactionExecutionError
    )

    task = repository.get(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
"""

from typing import Optional, Any, Dict, List


# ============================================================================
# Base Exception
# ============================================================================

class OrchestratorError(Exception):
    """
    Base exception for all orchestration errors.

    All custom exceptions inherit from this class so handlers can convert
    any of them into a failure event with ``to_dict()``.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for categorization
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        return self.message


# ============================================================================
# Configuration and Initialization Errors
# ============================================================================

class ConfigurationError(OrchestratorError):
    """Raised when there's an issue with configuration or settings."""

    def __init__(
        self,
        setting_name: str,
        message: str,
        expected_value: Optional[Any] = None,
        actual_value: Optional[Any] = None
    ):
        details = {"setting_name": setting_name}
        if expected_value is not None:
            details["expected_value"] = str(expected_value)
        if actual_value is not None:
            details["actual_value"] = str(actual_value)

        super().__init__(
            message=f"Configuration error for '{setting_name}': {message}",
            error_code="CONFIG_ERROR",
            details=details
        )
        self.setting_name = setting_name


class MissingDependencyError(OrchestratorError):
    """Raised when a required dependency is not installed."""

    def __init__(
        self,
        package_name: str,
        install_command: Optional[str] = None,
        purpose: Optional[str] = None
    ):
        message = f"Required package '{package_name}' is not installed"
        if purpose:
            message += f" (needed for {purpose})"
        if install_command:
            message += f"\nInstall with: {install_command}"

        super().__init__(
            message=message,
            error_code="MISSING_DEPENDENCY",
            details={
                "package_name": package_name,
                "install_command": install_command,
                "purpose": purpose
            }
        )
        self.package_name = package_name


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(OrchestratorError):
    """Base class for validation errors."""
    pass


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is invalid."""

    def __init__(
        self,
        parameter_name: str,
        message: str,
        expected_type: Optional[str] = None,
        actual_value: Optional[Any] = None
    ):
        details = {"parameter_name": parameter_name}
        if expected_type:
            details["expected_type"] = expected_type
        if actual_value is not None:
            details["actual_value"] = str(actual_value)

        super().__init__(
            message=f"Invalid parameter '{parameter_name}': {message}",
            error_code="INVALID_PARAM",
            details=details
        )
        self.parameter_name = parameter_name


class SchemaValidationError(ValidationError):
    """Raised when a payload or tool arguments don't match the declared schema."""

    def __init__(
        self,
        schema_name: str,
        validation_errors: List[str],
        data_sample: Optional[Any] = None
    ):
        message = f"Schema validation failed for '{schema_name}': " + "; ".join(validation_errors)

        details: Dict[str, Any] = {
            "schema_name": schema_name,
            "validation_errors": validation_errors
        }
        if data_sample is not None:
            details["data_sample"] = str(data_sample)[:200]

        super().__init__(
            message=message,
            error_code="SCHEMA_VALIDATION_ERROR",
            details=details
        )
        self.schema_name = schema_name
        self.validation_errors = validation_errors


# ============================================================================
# Execution Errors
# ============================================================================

class ExecutionError(OrchestratorError):
    """Base class for execution-time errors."""
    pass


class AgentExecutionError(ExecutionError):
    """Raised when an agent fails to handle an event for a task."""

    def __init__(
        self,
        operation: str,
        message: str,
        agent_name: Optional[str] = None,
        task_id: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        full_message = f"Agent execution failed for operation '{operation}': {message}"
        if agent_name:
            full_message = f"[{agent_name}] {full_message}"

        super().__init__(
            message=full_message,
            error_code="AGENT_EXEC_ERROR",
            details={
                "operation": operation,
                "agent_name": agent_name,
                "task_id": task_id,
                "original_error": str(original_error) if original_error else None
            }
        )
        self.operation = operation
        self.agent_name = agent_name
        self.task_id = task_id
        self.original_error = original_error


class ToolExecutionError(ExecutionError):
    """Raised inside a tool body; converted to a failed ToolResult at the tool boundary."""

    def __init__(
        self,
        tool_name: str,
        message: str,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=f"Tool '{tool_name}' failed: {message}",
            error_code="TOOL_EXEC_ERROR",
            details={
                "tool_name": tool_name,
                "original_error": str(original_error) if original_error else None
            }
        )
        self.tool_name = tool_name
        self.original_error = original_error


class AllToolsFailedError(ExecutionError):
    """Raised by the observer when every read-only tool failed for a task."""

    def __init__(self, task_id: str, tool_results: List[Dict[str, Any]]):
        names = ", ".join(r.get("tool", "unknown") for r in tool_results)
        if tool_results:
            message = f"All {len(tool_results)} observation tools failed for task {task_id} ({names})"
        else:
            message = f"No observation tools ran for task {task_id}"
        super().__init__(
            message=message,
            error_code="ALL_TOOLS_FAILED",
            details={"task_id": task_id, "tool_count": len(tool_results)}
        )
        self.task_id = task_id
        self.tool_results = tool_results


class TransactionExecutionError(ExecutionError):
    """Raised on the first failed on-chain step of a transaction plan."""

    def __init__(
        self,
        task_id: str,
        step_index: int,
        message: str,
        hashes: Optional[List[str]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=f"Transaction step {step_index + 1} failed for task {task_id}: {message}",
            error_code="TX_EXEC_ERROR",
            details={
                "task_id": task_id,
                "step_index": step_index,
                "hashes": list(hashes or []),
                "original_error": str(original_error) if original_error else None
            }
        )
        self.task_id = task_id
        self.step_index = step_index
        self.hashes = list(hashes or [])
        self.original_error = original_error


class TransactionPlanningError(ExecutionError):
    """Raised when the transaction planner cannot produce a plan for an instruction."""

    def __init__(self, prompt: str, message: str, original_error: Optional[Exception] = None):
        super().__init__(
            message=f"Could not plan transaction for '{prompt}': {message}",
            error_code="TX_PLAN_ERROR",
            details={
                "prompt": prompt,
                "original_error": str(original_error) if original_error else None
            }
        )
        self.prompt = prompt
        self.original_error = original_error


class RoutingError(ExecutionError):
    """Raised when a task is forwarded to an external agent that nobody serves."""

    def __init__(self, agent: str, channel: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"No listener for agent '{agent}' on channel '{channel}'",
            error_code="ROUTING_ERROR",
            details={"agent": agent, "channel": channel}
        )
        self.agent = agent
        self.channel = channel


class LLMError(ExecutionError):
    """Raised when a text-generation call fails."""

    def __init__(
        self,
        provider: str,
        message: str,
        model: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        full_message = f"LLM error ({provider}"
        if model:
            full_message += f"/{model}"
        full_message += f"): {message}"

        super().__init__(
            message=full_message,
            error_code="LLM_ERROR",
            details={
                "provider": provider,
                "model": model,
                "original_error": str(original_error) if original_error else None
            }
        )
        self.provider = provider
        self.model = model
        self.original_error = original_error


# ============================================================================
# Task Errors
# ============================================================================

class TaskError(OrchestratorError):
    """Base class for Task table errors."""
    pass


class TaskNotFoundError(TaskError):
    """Raised when a task id is not in the repository."""

    def __init__(self, task_id: str):
        super().__init__(
            message=f"Task not found: {task_id}",
            error_code="TASK_NOT_FOUND",
            details={"task_id": task_id}
        )
        self.task_id = task_id


class InvalidTransitionError(TaskError):
    """Raised when a status change would leave a terminal state or skip a stage."""

    def __init__(self, task_id: str, current_status: str, target_status: str):
        super().__init__(
            message=f"Task {task_id} cannot move from '{current_status}' to '{target_status}'",
            error_code="INVALID_TRANSITION",
            details={
                "task_id": task_id,
                "current_status": current_status,
                "target_status": target_status
            }
        )
        self.task_id = task_id
        self.current_status = current_status
        self.target_status = target_status


# ============================================================================
# Resource Errors
# ============================================================================

class ResourceError(OrchestratorError):
    """Base class for resource-related errors."""
    pass


class StorageError(ResourceError):
    """Raised when storage operations fail or a key is missing."""

    def __init__(
        self,
        key: str,
        operation: str,
        message: str,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=f"Storage operation '{operation}' failed for key '{key}': {message}",
            error_code="STORAGE_ERROR",
            details={
                "key": key,
                "operation": operation,
                "original_error": str(original_error) if original_error else None
            }
        )
        self.key = key
        self.operation = operation


class LicensingError(ResourceError):
    """Raised when the licensing collaborator rejects or fails a request."""

    def __init__(self, operation: str, message: str, license_id: Optional[str] = None):
        super().__init__(
            message=f"Licensing operation '{operation}' failed: {message}",
            error_code="LICENSING_ERROR",
            details={"operation": operation, "license_id": license_id}
        )
        self.operation = operation
        self.license_id = license_id


class NetworkError(ResourceError):
    """Raised when network operations fail."""

    def __init__(
        self,
        url: str,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        full_message = f"Network error for '{url}': {message}"
        if status_code:
            full_message += f" (status code: {status_code})"

        super().__init__(
            message=full_message,
            error_code="NETWORK_ERROR",
            details={
                "url": url,
                "status_code": status_code,
                "original_error": str(original_error) if original_error else None
            }
        )
        self.url = url
        self.status_code = status_code


# ============================================================================
# Utility Functions
# ============================================================================

def wrap_exception(
    original_error: Exception,
    operation: str,
    context: Optional[Dict[str, Any]] = None
) -> OrchestratorError:
    """
    Wrap a generic exception in an appropriate orchestration exception.

    Args:
        original_error: The original exception to wrap
        operation: The operation that was being performed
        context: Additional context about the error

    Returns:
        An appropriate OrchestratorError subclass
    """
    context = context or {}

    if isinstance(original_error, OrchestratorError):
        return original_error

    if isinstance(original_error, ImportError):
        return MissingDependencyError(
            package_name=context.get("package_name", "unknown"),
            purpose=operation,
            install_command=context.get("install_command")
        )

    elif isinstance(original_error, (ValueError, TypeError)):
        return InvalidParameterError(
            parameter_name=context.get("parameter_name", "unknown"),
            message=str(original_error)
        )

    return AgentExecutionError(
        operation=operation,
        message=str(original_error),
        agent_name=context.get("agent_name"),
        task_id=context.get("task_id"),
        original_error=original_error
    )


__all__ = [
    "OrchestratorError",
    "ConfigurationError",
    "MissingDependencyError",
    "ValidationError",
    "InvalidParameterError",
    "SchemaValidationError",
    "ExecutionError",
    "AgentExecutionError",
    "ToolExecutionError",
    "AllToolsFailedError",
    "TransactionExecutionError",
    "TransactionPlanningError",
    "RoutingError",
    "LLMError",
    "TaskError",
    "TaskNotFoundError",
    "InvalidTransitionError",
    "ResourceError",
    "StorageError",
    "LicensingError",
    "NetworkError",
    "wrap_exception",
]
