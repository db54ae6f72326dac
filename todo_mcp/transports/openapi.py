"""REST transport with a generated OpenAPI document.

Every registered tool becomes an endpoint under ``/api/tools/``. The HTTP
method is derived from the tool name, GET and DELETE read query parameters
and POST and PUT read a JSON body.
"""

import json
import logging
import re
from typing import Any

from aiohttp import web
from pydantic import BaseModel

from todo_mcp.config import AppConfig
from todo_mcp.tools.engine import InvocationEngine
from todo_mcp.tools.registry import ToolDescriptor
from todo_mcp.transports.protocol import to_jsonable
from todo_mcp.utils.dates import format_iso_datetime, utcnow

logger = logging.getLogger(__name__)

API_PREFIX = "/api/tools"
COMPONENT_REF = "#/components/schemas/{model}"

# Checked in order; the first matching prefix wins.
_METHOD_PREFIXES: list[tuple[str, tuple[str, ...]]] = [
    ("GET", ("get", "list", "retrieve")),
    ("POST", ("create", "add")),
    ("PUT", ("update", "modify", "complete")),
    ("DELETE", ("delete", "remove", "archive")),
]

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_INTEGER = re.compile(r"^-?\d+$")


def endpoint_path(tool_name: str) -> str:
    """Get the REST path for a tool.

    Example: ``createTask`` -> ``/api/tools/create-task``.
    """
    kebab = _CAMEL_BOUNDARY.sub(r"\1-\2", tool_name).lower()
    return f"{API_PREFIX}/{kebab}"


def http_method(tool_name: str) -> str:
    """Get the HTTP method for a tool from its name prefix. Defaults to POST."""
    name = tool_name.lower()
    for method, prefixes in _METHOD_PREFIXES:
        if name.startswith(prefixes):
            return method
    return "POST"


def schema_types(schema: dict[str, Any] | None) -> set[str]:
    """Collect the JSON Schema types a property accepts, looking through anyOf."""
    if not schema:
        return set()
    declared = schema.get("type")
    if isinstance(declared, str):
        types = {declared}
    else:
        types = set(declared or ())
    for option in schema.get("anyOf") or ():
        types |= schema_types(option)
    return types


def coerce_query_value(value: str, schema: dict[str, Any] | None = None) -> Any:
    """Coerce a query string value to the type its property declares.

    Only ``boolean`` and ``integer`` properties are converted; strings and
    undeclared parameters are passed through unchanged.
    """
    types = schema_types(schema)
    if "boolean" in types and value in ("true", "false"):
        return value == "true"
    if "integer" in types and _INTEGER.match(value):
        return int(value)
    return value


def build_openapi_document(
    tools: list[ToolDescriptor],
    config: AppConfig,
) -> dict[str, Any]:
    """Generate an OpenAPI 3.1 document from tool metadata.

    Shared model definitions (enums such as ``Priority``) are hoisted into
    ``components.schemas`` and referenced from the operations.

    Args:
        tools: Registered tools, in registration order.
        config: Application configuration for title, version and server URL.

    Returns:
        The OpenAPI document as a dictionary.
    """
    paths: dict[str, Any] = {}
    components: dict[str, Any] = {}

    for tool in tools:
        method = http_method(tool.name)
        input_schema = _component_schema(tool.input_schema, components)

        operation: dict[str, Any] = {
            "operationId": tool.name,
            "summary": f"{tool.name} - {tool.description}",
            "description": tool.description,
            "responses": {
                "200": {
                    "description": "Tool executed successfully",
                    "content": {"application/json": {"schema": _SUCCESS_SCHEMA}},
                },
                "400": {
                    "description": "Invalid parameters or tool execution error",
                    "content": {"application/json": {"schema": _FAILURE_SCHEMA}},
                },
            },
        }

        properties = input_schema.get("properties") or {}
        if properties:
            if method in ("GET", "DELETE"):
                required = set(input_schema.get("required") or [])
                operation["parameters"] = [
                    {
                        "name": name,
                        "in": "query",
                        "required": name in required,
                        "schema": schema,
                    }
                    for name, schema in properties.items()
                ]
            else:
                operation["requestBody"] = {
                    "required": bool(input_schema.get("required")),
                    "content": {"application/json": {"schema": input_schema}},
                }

        paths[endpoint_path(tool.name)] = {method.lower(): operation}

    return {
        "openapi": "3.1.0",
        "info": {
            "title": f"{config.server.name} API",
            "version": config.server.version,
            "description": (
                "REST API generated from the registered tools. It provides the "
                "same functionality as the MCP tools in a REST format."
            ),
        },
        "servers": [
            {
                "url": f"http://{config.server.host}:{config.server.port}",
                "description": "Development server",
            }
        ],
        "paths": paths,
        "components": {"schemas": components},
    }


def _component_schema(
    model: type[BaseModel] | None, components: dict[str, Any]
) -> dict[str, Any]:
    """JSON Schema for a tool input with its $defs moved into ``components``."""
    if model is None:
        return {"type": "object", "properties": {}}
    schema = model.model_json_schema(by_alias=True, ref_template=COMPONENT_REF)
    components.update(schema.pop("$defs", {}))
    return schema


_SUCCESS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "success": {"type": "boolean"},
        "result": {"description": "Tool execution result"},
        "tool": {"type": "string"},
        "executedAt": {"type": "string", "format": "date-time"},
    },
}

_FAILURE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "success": {"type": "boolean"},
        "error": {"type": "string"},
        "tool": {"type": "string"},
    },
}


class OpenApiTransport:
    """REST API generated from the tool registry, using aiohttp.

    Routes:
    - <METHOD> /api/tools/<kebab-name> -> one per tool
    - GET /doc -> OpenAPI 3.1 document
    - GET /health -> health check with the tool endpoint table
    - GET / -> API information

    Response format:
    - Success: {"success": true, "result": ..., "tool": ..., "executedAt": ...}
    - Error (400): {"success": false, "error": "...", "tool": ...}
    """

    def __init__(self, engine: InvocationEngine, config: AppConfig) -> None:
        """Initialize the OpenAPI transport.

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

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self._host}:{self._port}"

    @property
    def is_running(self) -> bool:
        """Check if the transport is running."""
        return self._site is not None

    def create_app(self) -> web.Application:
        """Build the aiohttp application with one route per registered tool."""
        app = web.Application()
        router = app.router
        router.add_get("/doc", self._handle_doc)
        router.add_get("/health", self._handle_health)
        router.add_get("/", self._handle_info)

        for tool in self._engine.registry:
            method = http_method(tool.name)
            path = endpoint_path(tool.name)
            router.add_route(method, path, self._make_tool_handler(tool, method))
            logger.debug("Generated endpoint: %s %s -> %s", method, path, tool.name)

        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()

        logger.info("OpenAPI transport listening at %s", self.url)
        logger.info("  OpenAPI document: %s/doc", self.url)
        logger.info("  Generated %d tool endpoints", len(self._engine.registry))

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
        self._site = None
        self._runner = None
        logger.info("OpenAPI server stopped")

    # Response helpers

    def _success_response(self, tool: str, result: Any) -> web.Response:
        """Create a success response."""
        return _json(
            {
                "success": True,
                "result": result,
                "tool": tool,
                "executedAt": format_iso_datetime(utcnow()),
            }
        )

    def _error_response(self, tool: str, message: str, status: int = 400) -> web.Response:
        """Create an error response."""
        return _json({"success": False, "error": message, "tool": tool}, status=status)

    # Route handlers

    def _make_tool_handler(self, tool: ToolDescriptor, method: str):
        properties = (tool.metadata()["inputSchema"] or {}).get("properties") or {}

        async def handler(request: web.Request) -> web.Response:
            if method in ("GET", "DELETE"):
                parameters: Any = {
                    key: coerce_query_value(value, properties.get(key))
                    for key, value in request.query.items()
                }
            elif request.can_read_body:
                try:
                    parameters = await request.json()
                except ValueError:
                    return self._error_response(tool.name, "Invalid JSON body")
            else:
                parameters = {}

            try:
                result = await self._engine.call(tool.name, parameters)
            except Exception as e:
                logger.error("Tool %s execution failed: %s", tool.name, e)
                return self._error_response(tool.name, str(e))

            return self._success_response(tool.name, result)

        return handler

    async def _handle_doc(self, request: web.Request) -> web.Response:
        """Handle GET /doc."""
        return _json(build_openapi_document(list(self._engine.registry), self._config))

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Handle GET /health."""
        tools = [
            {
                "name": tool.name,
                "description": tool.description or "No description available",
                "endpoint": endpoint_path(tool.name),
                "method": http_method(tool.name),
            }
            for tool in self._engine.registry
        ]
        return _json(
            {
                "status": "ok",
                "service": self._config.server.name,
                "version": self._config.server.version,
                "timestamp": format_iso_datetime(utcnow()),
                "tools": tools,
            }
        )

    async def _handle_info(self, request: web.Request) -> web.Response:
        """Handle GET / - API information."""
        return _json(
            {
                "name": f"{self._config.server.name} API",
                "version": self._config.server.version,
                "description": "REST API generated from the registered tools",
                "documentation": f"{self.url}/doc",
                "toolsEndpoint": API_PREFIX,
            }
        )


def _json(data: Any, status: int = 200) -> web.Response:
    return web.json_response(
        to_jsonable(data),
        status=status,
        dumps=lambda obj: json.dumps(obj, ensure_ascii=False),
    )
