"""MCP data-plane surface: server factory, tools, auth gate, observability."""
