"""
Presentation Layer - API endpoints and request/response handling.

This layer contains:
- api/: FastAPI routers (HTTP and the relay WebSocket)
- dependencies/: session identity for routes
"""
