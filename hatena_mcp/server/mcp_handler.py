"""
MCP Request Handler
===================

JSON-RPC 2.0 dispatch for the Model Context Protocol methods
``initialize``, ``tools/list`` and ``tools/call``. Tool calls are served by
a ``HatenaBlogClient`` and rendered as text content blocks.

The handler is transport-agnostic: ``handle`` takes the decoded request
body and returns an HTTP status together with the JSON-RPC response.
"""

from typing import Any, Dict, List, Optional, Tuple

from .. import __version__
from ..delivery.post_formatter import (
    format_post_detail,
    format_recent_posts,
    format_search_results,
)
from ..services.blog_client import DEFAULT_LIMIT, HatenaBlogClient
from ..utils.exceptions import HatenaMCPError, UnknownToolError, ValidationError
from ..utils.logging import get_logger_for_component

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "hatena-blog-mcp"

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

MCP_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "search_blog",
        "description": "Search blog posts by keyword",
        "inputSchema": {
            "type": "object",
            "properties": {
                "keyword": {"type": "string", "description": "Search keyword"},
                "limit": {
                    "type": "number",
                    "description": "Maximum number of results (default: 10)",
                    "default": DEFAULT_LIMIT,
                },
            },
            "required": ["keyword"],
        },
    },
    {
        "name": "get_recent_posts",
        "description": "Get recent blog posts",
        "inputSchema": {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "number",
                    "description": "Maximum number of results (default: 10)",
                    "default": DEFAULT_LIMIT,
                },
            },
        },
    },
    {
        "name": "get_post_by_url",
        "description": "Get blog post details by URL",
        "inputSchema": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "Blog post URL"},
            },
            "required": ["url"],
        },
    },
]


def create_error_response(
    code: int, message: str, data: Any = None, request_id: Any = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": request_id, "error": error}


def create_result_response(result: Any, request_id: Any = None) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def text_content(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


class McpHandler:
    """Routes JSON-RPC requests to blog client operations."""

    def __init__(self, client: HatenaBlogClient, default_limit: int = DEFAULT_LIMIT):
        self.client = client
        self.default_limit = default_limit
        self.logger = get_logger_for_component("mcp", blog_id=client.blog_id)

    def _limit(self, arguments: Dict[str, Any]) -> int:
        # Missing, null or zero falls back to the default
        limit = arguments.get("limit") or self.default_limit
        if isinstance(limit, float) and limit.is_integer():
            limit = int(limit)
        return limit

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Run one tool and return its MCP result payload.

        Raises:
            UnknownToolError: If ``name`` is not a registered tool
            HatenaMCPError: If the underlying operation fails
        """
        if name == "search_blog":
            keyword = arguments.get("keyword")
            posts = await self.client.search(keyword, self._limit(arguments))
            return text_content(format_search_results(keyword, posts))

        if name == "get_recent_posts":
            posts = await self.client.list_recent(self._limit(arguments))
            return text_content(format_recent_posts(posts))

        if name == "get_post_by_url":
            url = arguments.get("url")
            if not isinstance(url, str) or not url:
                raise ValidationError("url is required", field_name="url")
            post = await self.client.get_by_url(url)
            return text_content(format_post_detail(post))

        raise UnknownToolError(name)

    async def handle(self, payload: Any) -> Tuple[int, Dict[str, Any]]:
        """Dispatch one decoded JSON-RPC request.

        Returns:
            Tuple of (http_status, response_body)
        """
        if not isinstance(payload, dict):
            return 400, create_error_response(INVALID_REQUEST, "Invalid Request")

        method = payload.get("method")
        params = payload.get("params") or {}
        request_id = payload.get("id")

        if method == "initialize":
            return 200, create_result_response(
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": SERVER_NAME, "version": __version__},
                },
                request_id,
            )

        if method == "tools/list":
            return 200, create_result_response({"tools": MCP_TOOLS}, request_id)

        if method == "tools/call":
            return await self._handle_tool_call(params, request_id)

        return 400, create_error_response(
            METHOD_NOT_FOUND, f"Unknown method: {method}", request_id=request_id
        )

    async def _handle_tool_call(
        self, params: Any, request_id: Optional[Any]
    ) -> Tuple[int, Dict[str, Any]]:
        name = params.get("name") if isinstance(params, dict) else None
        if not name:
            return 400, create_error_response(
                INVALID_PARAMS, "Tool name is required", request_id=request_id
            )

        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            return 400, create_error_response(
                INVALID_PARAMS, "Tool arguments must be an object", request_id=request_id
            )

        try:
            result = await self.call_tool(name, arguments)

        except ValidationError as e:
            self.logger.warning(f"Invalid arguments for {name}: {e.message}", extra=e.to_dict())
            return 400, create_error_response(
                INVALID_PARAMS, "Invalid params", e.message, request_id=request_id
            )

        except HatenaMCPError as e:
            self.logger.error(f"Tool {name} failed: {e.message}", extra=e.to_dict())
            return 500, create_error_response(
                INTERNAL_ERROR,
                "Internal error",
                f"Tool execution failed: {e.message}",
                request_id=request_id,
            )

        self.logger.debug(f"Tool {name} completed", extra={"tool": name})
        return 200, create_result_response(result, request_id)
