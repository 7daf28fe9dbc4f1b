"""Explicit result variant for external data sources.

Every source returns an Outcome instead of raising, so fallback chains are
plain iteration over outcomes rather than exception-driven control flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from .enums import OutcomeStatus

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    status: OutcomeStatus
    value: T | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(OutcomeStatus.SUCCESS, value=value)

    @classmethod
    def no_data(cls, detail: str | None = None) -> Outcome[T]:
        return cls(OutcomeStatus.NO_DATA, detail=detail)

    @classmethod
    def error(cls, detail: str) -> Outcome[T]:
        return cls(OutcomeStatus.PROVIDER_ERROR, detail=detail)
