"""
GovernsAI SDK - Tool registration and governed execution.
"""

import logging
from typing import Any, Optional

from .base import FeatureClient
from .exceptions import ToolError, extract_error_details
from .models import BatchItemResult, Tool, ToolMetadata, ToolResult
from .utils import build_query_params

logger = logging.getLogger("governsai.tools")

# JSON schema type -> accepted Python types
_JSON_TYPES: dict[str, tuple] = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "array": (list, tuple),
    "object": (dict,),
}

_TYPE_NAMES = {
    "string": "a string",
    "number": "a number",
    "integer": "an integer",
    "boolean": "a boolean",
    "array": "an array",
    "object": "an object",
}


def _check_parameter(name: str, value: Any, schema: dict[str, Any]) -> Optional[str]:
    expected = schema.get("type")
    accepted = _JSON_TYPES.get(expected)
    if accepted is None:
        return None
    # bool is an int subclass but never a valid number
    if expected in ("number", "integer") and isinstance(value, bool):
        return f"Parameter {name} must be {_TYPE_NAMES[expected]}"
    if not isinstance(value, accepted):
        return f"Parameter {name} must be {_TYPE_NAMES[expected]}"
    return None


def validate_tool_arguments(tool: Tool, args: dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Check ``args`` against the tool's parameter schema.

    Returns ``(valid, errors)``; only required names and top-level JSON
    types are checked.
    """
    errors = [
        f"Missing required parameter: {name}" for name in tool.required if name not in args
    ]
    for name, value in args.items():
        schema = tool.properties.get(name)
        if schema:
            error = _check_parameter(name, value, schema)
            if error:
                errors.append(error)
    return not errors, errors


class ToolClient(FeatureClient):
    """Client for tool registration, configuration and execution."""

    error_cls = ToolError
    status_path = "/api/tools"

    async def register_tools(self, tools: list[Tool]) -> None:
        await self._request(
            "POST",
            "/api/v1/tools",
            "register tools",
            body={"tools": [tool.to_dict() for tool in tools]},
        )
        logger.info("Registered %d tool(s)", len(tools))

    async def register_tools_with_metadata(self, tools: list[Tool]) -> None:
        await self._request(
            "POST",
            "/api/agents/tools/register",
            "register tools with metadata",
            body={"tools": [tool.to_dict() for tool in tools]},
        )

    async def register_agent_tools(self, tool_names: list[str]) -> None:
        """Declare which registered tools this agent uses."""
        await self._request(
            "POST", "/api/agents/tools", "register agent tools", body={"toolNames": tool_names}
        )

    async def get_agent_tools(self) -> list[str]:
        data = await self._request("GET", "/api/agents/tools", "get agent tools")
        return list(data.get("tools", []))

    async def get_tool_metadata(self, tool_name: str) -> Optional[ToolMetadata]:
        data = await self._request(
            "GET", f"/api/tools/{tool_name}/metadata", "get tool metadata"
        )
        metadata = data.get("metadata") if isinstance(data, dict) else None
        return ToolMetadata.from_dict(metadata) if metadata else None

    async def execute_tool(self, tool_name: str, args: dict[str, Any]) -> ToolResult:
        """Run ``tool_name`` through the platform's governed MCP endpoint."""
        logger.debug("Executing tool %s", tool_name)
        data = await self._request(
            "POST", "/api/mcp", "execute tool", body={"tool": tool_name, "args": args}
        )
        result = self._parse(ToolResult.from_dict, data, "execute tool")
        logger.debug("Tool %s completed (success=%s)", tool_name, result.success)
        return result

    async def list_tools(
        self,
        category: Optional[str] = None,
        risk_level: Optional[str] = None,
        requires_approval: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[Tool]:
        params = build_query_params(
            {
                "category": category,
                "risk_level": risk_level,
                "requires_approval": requires_approval,
                "limit": limit,
                "offset": offset,
            }
        )
        data = await self._request("GET", "/api/tools", "list tools", params=params)
        return [Tool.from_dict(item) for item in data.get("tools", [])]

    async def get_tools_requiring_approval(self) -> list[Tool]:
        return await self.list_tools(requires_approval=True)

    # ==================== Tool configuration ====================

    async def create_tool_config(self, metadata: ToolMetadata) -> ToolMetadata:
        data = await self._request(
            "POST", "/api/tools", "create tool config", body=metadata.to_dict()
        )
        return ToolMetadata.from_dict(data)

    async def update_tool_config(self, tool_name: str, **updates: Any) -> ToolMetadata:
        data = await self._request(
            "PUT", f"/api/tools/{tool_name}", "update tool config", body=updates
        )
        return ToolMetadata.from_dict(data)

    async def delete_tool_config(self, tool_name: str) -> None:
        await self._request("DELETE", f"/api/tools/{tool_name}", "delete tool config")
        logger.info("Tool configuration deleted: %s", tool_name)

    @staticmethod
    def validate_tool_arguments(tool: Tool, args: dict[str, Any]) -> tuple[bool, list[str]]:
        return validate_tool_arguments(tool, args)

    # ==================== Batch operations ====================

    async def register_batch_tools(self, tools: list[Tool]) -> list[BatchItemResult]:
        """Register tools one at a time so one rejection does not block the rest."""
        results = []
        for index, tool in enumerate(tools):
            try:
                await self.register_tools([tool])
            except Exception as e:
                logger.error("Failed to register tool %s in batch: %s", tool.name, e)
                results.append(
                    BatchItemResult(
                        index=index, success=False, error=extract_error_details(e)["message"]
                    )
                )
            else:
                results.append(BatchItemResult(index=index, success=True))
        return results

    async def execute_batch_tools(self, calls: list[dict[str, Any]]) -> list[ToolResult]:
        """
        Execute ``[{"tool": ..., "args": ...}, ...]`` in order.

        The result list always matches ``calls`` in length and order; a
        failed call yields ``ToolResult(success=False, error=...)``.
        """
        results = []
        for call in calls:
            try:
                results.append(await self.execute_tool(call["tool"], call.get("args") or {}))
            except Exception as e:
                logger.error("Failed to execute tool %s in batch: %s", call.get("tool"), e)
                message = extract_error_details(e)["message"]
                results.append(ToolResult(success=False, error=f"Tool execution failed: {message}"))
        logger.info("Batch tool execution completed: %d call(s)", len(results))
        return results
