"""
Tool contract - Uniform invocation envelope for every agent capability

A tool is a name, a description, a pydantic model describing its arguments
and an async body. ``Tool.execute`` validates the arguments against the
model before calling the body and converts every failure into
``ToolResult(success=False, error=...)``; callers never need a try/except
around it.

Usage:
    class SendMessageArgs(BaseModel):
        message: str = Field(..., min_length=1)

    @tool("sendMessageToObserver", "Forward a message to the observer", SendMessageArgs)
    async def send_message_to_observer(args: SendMessageArgs, options: ToolExecutionOptions):
        return f"Message sent to observer: {args.message}"

    result = await send_message_to_observer.execute({"message": "check AVAX"})
"""

import time
import traceback
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ava_orchestrator.utils.exceptions import OrchestratorError
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


class NoArguments(BaseModel):
    """Schema for tools that take no arguments."""
    pass


@dataclass
class ToolResult:
    """The single response shape of every tool call."""
    success: bool
    result: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, result: Any) -> "ToolResult":
        return cls(success=True, result=result)

    @classmethod
    def fail(cls, error: str, result: Any = None) -> "ToolResult":
        return cls(success=False, result=result, error=error)

    def to_dict(self) -> Dict[str, Any]:
        data = {"success": self.success, "result": self.result}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class ToolExecutionOptions:
    """Per-call context handed to the tool body."""
    tool_call_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    messages: List[Any] = field(default_factory=list)
    severity: str = "info"


ToolFunc = Callable[[Any, ToolExecutionOptions], Awaitable[Any]]


@dataclass
class Tool:
    """
    A named, schema-validated capability.

    Attributes:
        name: Tool name, unique within a toolkit
        description: What the tool does, shown to text generators
        func: ``async def func(args, options)``; ``args`` is an instance of ``parameters``.
            Returning a ToolResult passes it through unchanged, any other value becomes
            ``ToolResult(success=True, result=value)``.
        parameters: pydantic model the arguments are validated against
    """
    name: str
    description: str
    func: ToolFunc
    parameters: Type[BaseModel] = NoArguments

    async def execute(
        self,
        args: Optional[Dict[str, Any]] = None,
        options: Optional[ToolExecutionOptions] = None
    ) -> ToolResult:
        """
        Validate ``args`` and run the tool.

        Never raises for failures inside the tool; the error is returned
        in ``ToolResult.error``.
        """
        options = options or ToolExecutionOptions()
        start = time.monotonic()

        try:
            params = self.parameters.model_validate(args or {})
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
            )
            logger.warning(f"[TOOL] {self.name} rejected arguments: {problems}")
            return ToolResult.fail(f"Invalid arguments for {self.name}: {problems}")

        logger.debug(f"[TOOL] {self.name} started (call {options.tool_call_id})")

        try:
            outcome = await self.func(params, options)
        except OrchestratorError as e:
            logger.error(f"[TOOL] {self.name} failed: {e.message}")
            return ToolResult.fail(e.message, result=e.details or None)
        except Exception as e:
            logger.error(f"[TOOL] {self.name} failed: {e}")
            logger.debug(traceback.format_exc())
            return ToolResult.fail(str(e) or e.__class__.__name__)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if isinstance(outcome, ToolResult):
            level = "completed" if outcome.success else "returned failure"
            logger.info(f"[TOOL] {self.name} {level} in {elapsed_ms}ms")
            return outcome

        logger.info(f"[TOOL] {self.name} completed in {elapsed_ms}ms")
        return ToolResult.ok(outcome)

    def schema(self) -> Dict[str, Any]:
        """JSON schema of the tool, in the function-calling layout used by chat models."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.model_json_schema(),
        }


def tool(name: str, description: str, parameters: Type[BaseModel] = NoArguments) -> Callable[[ToolFunc], Tool]:
    """Decorator turning an async function into a Tool."""
    def decorator(func: ToolFunc) -> Tool:
        return Tool(name=name, description=description, func=func, parameters=parameters)
    return decorator


class Toolkit:
    """
    Ordered collection of tools keyed by name.

    Agents look their tools up here instead of holding them as attributes,
    so tests can swap a single tool with ``replace``.
    """

    def __init__(self, tools: Optional[List[Tool]] = None):
        self._tools: Dict[str, Tool] = {}
        for t in tools or []:
            self.add(t)

    def add(self, t: Tool) -> None:
        if t.name in self._tools:
            raise ValueError(f"Duplicate tool name: {t.name}")
        self._tools[t.name] = t

    def replace(self, t: Tool) -> None:
        if t.name not in self._tools:
            raise KeyError(t.name)
        self._tools[t.name] = t

    def get(self, name: str) -> Tool:
        return self._tools[name]

    def __getitem__(self, name: str) -> Tool:
        return self._tools[name]

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> List[str]:
        return list(self._tools)

    def schemas(self) -> List[Dict[str, Any]]:
        return [t.schema() for t in self._tools.values()]
