"""Visibility-driven ratio enrichment for one holding-detail view.

Rows report themselves visible as the user scrolls.  The scheduler collects
their indices, waits for the burst to settle (debounce), then issues one
bounded batch request at a time (single-flight).  Rows discovered while a
batch is in flight wait in the pending set and are drained by a follow-up
debounce cycle once that batch completes.

State per view:
  pending   indices awaiting a request
  fetched   indices already requested (success or in flight); not re-queued
  loading   indices in the current batch (UI feedback)
  in_flight at most one outstanding batch

A failed batch returns its indices to retry eligibility; a cancelled batch
(the view was closed) does not.  After close() nothing mutates state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from fundscope.domain.models.composition import Composition
from fundscope.domain.models.ratios import RatioQuote

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.2
BATCH_LIMIT = 10

BatchFetcher = Callable[[list[str]], Awaitable[Sequence[RatioQuote]]]
Persister = Callable[[Composition], Awaitable[None]]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timer(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopTimer:
    """Timer backed by the running event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class VisibilityScheduler:
    def __init__(
        self,
        composition: Composition,
        fetch_batch: BatchFetcher,
        persist: Persister,
        timer: Timer | None = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        batch_limit: int = BATCH_LIMIT,
    ) -> None:
        self._composition = composition
        self._fetch_batch = fetch_batch
        self._persist = persist
        self._timer = timer or LoopTimer()
        self._debounce_seconds = debounce_seconds
        self._batch_limit = batch_limit

        self._enabled = False
        self._closed = False
        self._pending: set[int] = set()
        self._fetched: set[int] = set()
        self._loading: set[int] = set()
        self._in_flight = False
        self._handle: TimerHandle | None = None
        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------ #
    # State                                                                #
    # ------------------------------------------------------------------ #

    @property
    def composition(self) -> Composition:
        return self._composition

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def pending(self) -> frozenset[int]:
        return frozenset(self._pending)

    @property
    def fetched(self) -> frozenset[int]:
        return frozenset(self._fetched)

    @property
    def loading(self) -> frozenset[int]:
        return frozenset(self._loading)

    # ------------------------------------------------------------------ #
    # Events                                                               #
    # ------------------------------------------------------------------ #

    def enable(self) -> None:
        """Turn enrichment on, forgetting pending rows and rows fetched by finished batches."""
        if self._closed:
            return
        self._pending.clear()
        # Rows of the in-flight batch stay fetched until it completes.
        self._fetched.intersection_update(self._loading)
        self._enabled = True

    def on_visible(self, index: int) -> None:
        if self._closed or not self._enabled:
            return
        if index in self._fetched or not 0 <= index < len(self._composition.constituents):
            return
        if self._composition.constituents[index].ratio is not None:
            return
        self._pending.add(index)
        self._schedule()

    def close(self) -> None:
        """Tear down: cancel the in-flight batch and timers, clear every set."""
        self._closed = True
        self._enabled = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._pending.clear()
        self._fetched.clear()
        self._loading.clear()
        self._in_flight = False

    async def join(self) -> None:
        """Wait for the in-flight batch, if any, to finish."""
        task = self._task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    # ------------------------------------------------------------------ #
    # Batching                                                             #
    # ------------------------------------------------------------------ #

    def _schedule(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self._timer.call_later(self._debounce_seconds, self._on_debounce)

    def _on_debounce(self) -> None:
        self._handle = None
        if self._closed or self._in_flight:
            # A completing batch re-arms the timer if anything is still pending.
            return

        constituents = self._composition.constituents
        batch: list[int] = []
        for index in sorted(self._pending):
            if constituents[index].ratio is not None:
                self._pending.discard(index)
                self._fetched.add(index)
                continue
            batch.append(index)
            if len(batch) == self._batch_limit:
                break
        if not batch:
            return

        for index in batch:
            self._pending.discard(index)
            self._fetched.add(index)
            self._loading.add(index)
        self._in_flight = True
        self._task = asyncio.get_running_loop().create_task(self._run_batch(batch))

    async def _run_batch(self, indices: list[int]) -> None:
        names = [self._composition.constituents[i].name for i in indices]
        try:
            quotes = await self._fetch_batch(names)
        except asyncio.CancelledError:
            logger.debug("Ratio batch cancelled: %s", names)
            raise
        except Exception:
            logger.exception("Error fetching ratio batch: %s", names)
            if not self._closed:
                self._fetched.difference_update(indices)
        else:
            if not self._closed:
                self._apply(quotes)
                await self._save()
        finally:
            if not self._closed:
                self._loading.difference_update(indices)
                self._in_flight = False
                self._task = None
                if self._pending:
                    self._schedule()

    def _apply(self, quotes: Sequence[RatioQuote]) -> None:
        by_name = {q.name: q for q in quotes}
        constituents = [
            by_name[c.name].apply_to(c) if c.name in by_name else c
            for c in self._composition.constituents
        ]
        self._composition = self._composition.model_copy(update={"constituents": constituents})

    async def _save(self) -> None:
        try:
            await self._persist(self._composition)
        except Exception:
            logger.exception("Could not persist enriched composition %s", self._composition.identifier)
