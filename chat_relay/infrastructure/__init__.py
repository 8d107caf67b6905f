"""
INFRASTRUCTURE LAYER - Adapters for the domain ports

- persistence/ → Prisma gateway and gateway-backed message repository
- cache/       → Redis history cache decorator
- transport/   → WebSocket message stream
"""
