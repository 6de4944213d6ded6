"""
WireView - inspect MCP servers over JSON-RPC/HTTP

A Python client for exercising Model Context Protocol (MCP) servers one
method at a time, showing exactly what went over the wire: the request that
was sent, every Server-Sent Event that came back, and the final response.
"""

__version__ = "0.1.0"
__license__ = "MIT"
