"""
Tests for the tool contract.
"""

import pytest
from pydantic import BaseModel, Field

from ava_orchestrator.core.tool import Tool, ToolExecutionOptions, ToolResult, Toolkit, tool
from ava_orchestrator.utils.exceptions import RoutingError


class EchoArgs(BaseModel):
    message: str = Field(..., min_length=1)
    times: int = Field(1, ge=1, le=3)


@tool("echo", "Repeat a message", EchoArgs)
async def echo(args: EchoArgs, options: ToolExecutionOptions):
    return " ".join([args.message] * args.times)


class TestToolExecute:

    @pytest.mark.asyncio
    async def test_success_wraps_plain_value(self):
        result = await echo.execute({"message": "hi", "times": 2})
        assert result == ToolResult(success=True, result="hi hi")

    @pytest.mark.asyncio
    async def test_invalid_arguments_never_reach_the_body(self):
        """Test that schema validation fails before invocation and is returned, not raised."""
        called = []

        async def body(args, options):
            called.append(args)

        guarded = Tool("guarded", "needs a message", body, EchoArgs)
        result = await guarded.execute({"times": 9})

        assert result.success is False
        assert "message" in result.error
        assert "times" in result.error
        assert called == []

    @pytest.mark.asyncio
    async def test_internal_fault_becomes_failure(self):
        async def body(args, options):
            raise RuntimeError("upstream exploded")

        result = await Tool("explodes", "", body).execute()
        assert result.success is False
        assert result.error == "upstream exploded"
        assert result.result is None

    @pytest.mark.asyncio
    async def test_orchestrator_error_keeps_details(self):
        async def body(args, options):
            raise RoutingError("cookie", "task-manager-cookie")

        result = await Tool("route", "", body).execute()
        assert result.success is False
        assert "cookie" in result.error
        assert result.result == {"agent": "cookie", "channel": "task-manager-cookie"}

    @pytest.mark.asyncio
    async def test_returned_tool_result_passes_through(self):
        async def body(args, options):
            return ToolResult.fail("nothing to do", result={"reason": "empty"})

        result = await Tool("noop", "", body).execute()
        assert result.error == "nothing to do"
        assert result.result == {"reason": "empty"}

    @pytest.mark.asyncio
    async def test_options_reach_the_body(self):
        seen = []

        async def body(args, options):
            seen.append(options)
            return None

        options = ToolExecutionOptions(tool_call_id="call-1", severity="warning")
        await Tool("opts", "", body).execute({}, options)
        assert seen[0].tool_call_id == "call-1"
        assert seen[0].severity == "warning"

    def test_to_dict_omits_missing_error(self):
        assert ToolResult.ok(1).to_dict() == {"success": True, "result": 1}
        assert ToolResult.fail("x").to_dict() == {"success": False, "result": None, "error": "x"}


class TestToolkit:

    def test_lookup_and_schema(self):
        toolkit = Toolkit([echo])
        assert "echo" in toolkit
        assert toolkit["echo"] is echo
        assert toolkit.names() == ["echo"]
        schema = toolkit.schemas()[0]
        assert schema["name"] == "echo"
        assert "message" in schema["parameters"]["properties"]

    def test_duplicate_names_are_rejected(self):
        with pytest.raises(ValueError):
            Toolkit([echo, echo])

    def test_replace_requires_existing_tool(self):
        toolkit = Toolkit([echo])

        async def other(args, options):
            return "other"

        toolkit.replace(Tool("echo", "replacement", other))
        assert toolkit["echo"].description == "replacement"
        with pytest.raises(KeyError):
            toolkit.replace(Tool("missing", "", other))
