from .memory import InMemoryTimedCache

__all__ = ["InMemoryTimedCache"]
