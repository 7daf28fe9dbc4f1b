"""Domain repository and source interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in fundscope/infrastructure/ and are wired at
the application boundary via dependency injection.
"""

from .base import TimedCache
from .sources import CompositionSource, RatioSource, RegistrySource

__all__ = [
    "TimedCache",
    "CompositionSource",
    "RegistrySource",
    "RatioSource",
]
