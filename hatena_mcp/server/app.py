"""
HTTP Transport
==============

aiohttp web application exposing the MCP handler over HTTP POST with
permissive CORS headers.
"""

import json
from typing import Optional

from aiohttp import web

from ..config.settings import HatenaMCPSettings, get_settings
from ..services.blog_client import HatenaBlogClient
from ..utils.logging import get_logger_for_component
from .mcp_handler import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    McpHandler,
    create_error_response,
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "X-Requested-With, Content-Type, Accept, Authorization",
}

HANDLER_KEY = web.AppKey("mcp_handler", McpHandler)
CLIENT_KEY = web.AppKey("blog_client", HatenaBlogClient)

logger = get_logger_for_component("server")


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        response = await handler(request)
    except web.HTTPException as e:
        e.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.exception(f"MCP Server Error: {e}")
        return web.json_response(
            create_error_response(INTERNAL_ERROR, "Internal error", str(e)), status=500
        )


async def handle_mcp(request: web.Request) -> web.Response:
    if request.method == "OPTIONS":
        return web.Response(status=200)

    if request.method != "POST":
        return web.json_response(
            create_error_response(METHOD_NOT_FOUND, "Method not allowed"), status=405
        )

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return web.json_response(create_error_response(PARSE_ERROR, "Parse error"), status=400)

    status, body = await request.app[HANDLER_KEY].handle(payload)
    return web.json_response(body, status=status)


async def handle_health(request: web.Request) -> web.Response:
    client = request.app[CLIENT_KEY]
    return web.json_response({"status": "ok", "blog_id": client.blog_id})


def create_app(
    settings: Optional[HatenaMCPSettings] = None,
    client: Optional[HatenaBlogClient] = None,
) -> web.Application:
    """Build the web application.

    Args:
        settings: Application settings (defaults to the global settings)
        client: Pre-built blog client; built from ``settings`` when omitted
    """
    settings = settings or get_settings()
    client = client or HatenaBlogClient(
        settings.blog.blog_id,
        cache_duration=settings.blog.cache_duration,
        request_timeout=settings.limits.request_timeout,
    )

    app = web.Application(middlewares=[cors_middleware, error_middleware])
    app[CLIENT_KEY] = client
    app[HANDLER_KEY] = McpHandler(client, default_limit=settings.limits.default_result_limit)

    app.router.add_route("*", settings.server.path, handle_mcp)
    app.router.add_get("/health", handle_health)

    logger.info(
        f"MCP endpoint {settings.server.path} serving feed {client.feed_url}",
        extra={"blog_id": client.blog_id},
    )
    return app


def run_server(settings: Optional[HatenaMCPSettings] = None) -> None:
    """Serve the application until interrupted."""
    settings = settings or get_settings()
    web.run_app(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        print=None,
    )
