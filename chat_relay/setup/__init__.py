"""Application setup: DI container."""
