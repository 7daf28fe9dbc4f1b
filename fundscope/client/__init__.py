from .api_client import FundscopeClient
from .scheduler import LoopTimer, Timer, TimerHandle, VisibilityScheduler
from .storage import DurableCaches, make_client, open_durable_caches, scheduler_for

__all__ = [
    "DurableCaches",
    "FundscopeClient",
    "LoopTimer",
    "Timer",
    "TimerHandle",
    "VisibilityScheduler",
    "make_client",
    "open_durable_caches",
    "scheduler_for",
]
