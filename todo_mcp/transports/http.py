"""HTTP JSON-RPC transport.

Serves the tool registry as MCP-style JSON-RPC 2.0 over plain HTTP.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web

from todo_mcp.config import AppConfig
from todo_mcp.exceptions import ToolError
from todo_mcp.tools.engine import InvocationEngine
from todo_mcp.transports.protocol import (
    ErrorCode,
    JsonRpcRequest,
    JsonRpcResponse,
    exception_to_error_code,
    exception_to_error_data,
    to_jsonable,
)
from todo_mcp.utils.dates import format_iso_datetime, utcnow

logger = logging.getLogger(__name__)

MCP_PROTOCOL_VERSION = "2025-03-26"

MethodHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class HttpTransport:
    """JSON-RPC over HTTP using aiohttp.

    Routes:
    - POST / -> JSON-RPC 2.0 (initialize, ping, tools/list, tools/call, tools/batch)
    - GET /health -> health check
    - GET / -> service information and usage
    - any other method on / -> 405 with a JSON-RPC error body
    """

    TRANSPORT_NAME = "http"

    def __init__(self, engine: InvocationEngine, config: AppConfig) -> None:
        """Initialize the HTTP transport.

        Args:
            engine: Invocation engine whose registry is served.
            config: Application configuration (bind address, server identity).
        """
        self._engine = engine
        self._config = config
        self._host = config.server.host
        self._port = config.server.port
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._methods: dict[str, MethodHandler] = {
            "initialize": self._rpc_initialize,
            "ping": self._rpc_ping,
            "tools/list": self._rpc_tools_list,
            "tools/call": self._rpc_tools_call,
            "tools/batch": self._rpc_tools_batch,
        }

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self._host}:{self._port}"

    @property
    def is_running(self) -> bool:
        """Check if the transport is running."""
        return self._site is not None

    def create_app(self) -> web.Application:
        """Build the aiohttp application."""
        app = web.Application()
        router = app.router
        router.add_post("/", self._handle_rpc)
        router.add_get("/", self._handle_info)
        router.add_route("*", "/", self._handle_not_allowed)
        router.add_get("/health", self._handle_health)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()

        logger.info("HTTP transport listening at %s", self.url)
        logger.info("  MCP endpoint: %s/ (POST)", self.url)
        logger.info("  Health check: %s/health", self.url)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
        self._site = None
        self._runner = None
        logger.info("HTTP server stopped")

    async def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Dispatch a JSON-RPC request to the matching method.

        Args:
            request: Parsed request.

        Returns:
            JSON-RPC response; errors are reported in the response, never raised.
        """
        method = self._methods.get(request.method)
        if method is None:
            return JsonRpcResponse.error_response(
                ErrorCode.METHOD_NOT_FOUND,
                f"Method not found: {request.method}",
                request_id=request.id,
            )

        try:
            result = await method(request.params or {})
            return JsonRpcResponse.success(result, request_id=request.id)
        except ToolError as e:
            return JsonRpcResponse.error_response(
                exception_to_error_code(e),
                str(e),
                data=exception_to_error_data(e),
                request_id=request.id,
            )
        except ValueError as e:
            return JsonRpcResponse.error_response(
                ErrorCode.INVALID_PARAMS,
                str(e),
                request_id=request.id,
            )

    # JSON-RPC methods

    async def _rpc_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": params.get("protocolVersion", MCP_PROTOCOL_VERSION),
            "capabilities": {"tools": {}},
            "serverInfo": {
                "name": self._config.server.name,
                "version": self._config.server.version,
            },
        }

    async def _rpc_ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _rpc_tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": self._engine.registry.list()}

    async def _rpc_tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("Missing required field: name")
        result = await self._engine.call(name, params.get("arguments") or {})
        return {"content": result}

    async def _rpc_tools_batch(self, params: dict[str, Any]) -> dict[str, Any]:
        calls = params.get("calls")
        if not isinstance(calls, list):
            raise ValueError("Field 'calls' must be an array")
        results = await self._engine.call_batch(calls)
        return {"results": [r.to_dict() for r in results]}

    # Route handlers

    async def _handle_rpc(self, request: web.Request) -> web.Response:
        """Handle POST / - JSON-RPC endpoint."""
        try:
            body = await request.json()
        except ValueError:
            return _json(
                JsonRpcResponse.error_response(ErrorCode.PARSE_ERROR, "Invalid JSON").to_dict()
            )

        try:
            rpc_request = JsonRpcRequest.from_dict(body)
        except ValueError as e:
            request_id = body.get("id") if isinstance(body, dict) else None
            return _json(
                JsonRpcResponse.error_response(
                    ErrorCode.INVALID_REQUEST,
                    str(e),
                    request_id=request_id,
                ).to_dict()
            )

        logger.debug("JSON-RPC %s (id=%s)", rpc_request.method, rpc_request.id)
        response = await self.dispatch(rpc_request)
        return _json(response.to_dict())

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Handle GET /health."""
        return _json(
            {
                "status": "ok",
                "service": self._config.server.name,
                "version": self._config.server.version,
                "transport": self.TRANSPORT_NAME,
                "tools": len(self._engine.registry),
                "timestamp": format_iso_datetime(utcnow()),
            }
        )

    async def _handle_info(self, request: web.Request) -> web.Response:
        """Handle GET / - service information."""
        return _json(
            {
                "name": self._config.server.name,
                "version": self._config.server.version,
                "description": "Todo MCP server with HTTP JSON-RPC transport",
                "transport": self.TRANSPORT_NAME,
                "endpoints": {
                    "mcp": "POST /",
                    "health": "GET /health",
                },
                "usage": {
                    "description": "Send JSON-RPC 2.0 requests to POST / for MCP communication",
                    "example": {
                        "method": "POST",
                        "url": "/",
                        "headers": {"Content-Type": "application/json"},
                        "body": {"jsonrpc": "2.0", "method": "tools/list", "id": 1},
                    },
                },
                "timestamp": format_iso_datetime(utcnow()),
            }
        )

    async def _handle_not_allowed(self, request: web.Request) -> web.Response:
        """Handle unsupported methods on /."""
        return _json(
            JsonRpcResponse.error_response(
                ErrorCode.SERVER_ERROR,
                "Method not allowed. Use POST for MCP communication.",
            ).to_dict(),
            status=405,
        )


def _json(data: Any, status: int = 200) -> web.Response:
    return web.json_response(
        to_jsonable(data),
        status=status,
        dumps=lambda obj: json.dumps(obj, ensure_ascii=False),
    )
