"""
APPLICATION LAYER - Use Cases & Orchestration

This layer contains:
- relay/       → registry, fan-out channels, frame parsing, connection sessions
- membership/  → membership authority (capability check)
- commands/    → write operations (CQRS)
- queries/     → read operations (CQRS)
- dto/         → Data Transfer Objects
- common/      → Command / Query base classes

Rules:
- Depends on the Domain layer (plus config and metrics recording)
- No HTTP/framework code here
"""
