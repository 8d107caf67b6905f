"""
DOMAIN LAYER

This layer contains:
- Entities: records with identity (Message, ConversationMember) and the
  immutable OutgoingEvent broadcast to subscribers
- Value Objects: ConversationId, UserId
- Ports: PersistenceGateway, MessageRepository, MessageStream
- Exceptions: domain-specific errors

RULES:
1. NO framework imports (no FastAPI, Prisma, Redis, Pydantic)
2. NO I/O operations
3. Only depends on Python stdlib
"""
