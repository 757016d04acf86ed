"""MCP JSON-RPC dispatch and HTTP transport."""
