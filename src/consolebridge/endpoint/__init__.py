"""HTTP and WebSocket endpoint for consolebridge.

A FastAPI application that accepts console connections over a
WebSocket, hands them to the SessionManager, and exposes read-only
health and metadata routes.
"""
