"""Tests for fundscope/domain/services/resolver.py: fallback order, cache, overlay."""

from datetime import datetime, timedelta, timezone

from fundscope.domain.models.composition import Composition, Constituent, RegistryInfo
from fundscope.domain.models.outcome import Outcome
from fundscope.domain.repositories.sources import CompositionSource, RegistrySource
from fundscope.domain.services.resolver import CompositionResolver
from fundscope.infrastructure.cache.memory import InMemoryTimedCache

T0 = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


class _Source(CompositionSource):
    def __init__(self, label, outcome):
        self.label = label
        self._outcome = outcome
        self.calls = 0

    async def resolve(self, identifier, name):
        self.calls += 1
        return self._outcome


class _Registry(RegistrySource):
    label = "MFAPI"

    def __init__(self, outcome):
        self._outcome = outcome
        self.calls = 0

    async def lookup(self, identifier):
        self.calls += 1
        return self._outcome


def _composition(**overrides):
    defaults = {
        "holding_name": "Alpha Flexi Cap Fund",
        "identifier": "provider-id",
        "constituents": [Constituent(name="Acme Ltd", weight=10.0)],
        "source": "unset",
    }
    defaults.update(overrides)
    return Composition(**defaults)


def _resolver(sources, registry=None, clock=None):
    clock = clock or _Clock()
    cache = InMemoryTimedCache(clock=clock)
    return CompositionResolver(sources, registry, cache, clock=clock)


# --- fallback ---

async def test_first_successful_source_wins_and_later_sources_not_called():
    a = _Source("A", Outcome.error("boom"))
    b = _Source("B", Outcome.success(_composition()))
    c = _Source("C", Outcome.success(_composition()))
    result = await _resolver([a, b, c]).resolve("INF000A01", "Alpha Flexi Cap Fund")
    assert result.source == "B"
    assert (a.calls, b.calls, c.calls) == (1, 1, 0)


async def test_source_with_empty_composition_falls_through():
    a = _Source("A", Outcome.success(_composition(constituents=[])))
    b = _Source("B", Outcome.success(_composition()))
    result = await _resolver([a, b]).resolve("INF000A01", "Alpha")
    assert result.source == "B"


async def test_no_data_falls_through_to_next_source():
    a = _Source("A", Outcome.no_data())
    b = _Source("B", Outcome.success(_composition()))
    assert (await _resolver([a, b]).resolve("INF000A01", "Alpha")).source == "B"


async def test_result_identifier_is_the_requested_identifier():
    b = _Source("B", Outcome.success(_composition()))
    assert (await _resolver([b]).resolve("INF000A01", "Alpha")).identifier == "INF000A01"


async def test_resolved_at_comes_from_clock():
    b = _Source("B", Outcome.success(_composition()))
    assert (await _resolver([b]).resolve("INF000A01", "Alpha")).resolved_at == T0


# --- all sources fail ---

async def test_all_sources_fail_returns_empty_result():
    a = _Source("A", Outcome.error("x"))
    result = await _resolver([a]).resolve("INF000A01", "Alpha Flexi Cap Fund")
    assert result.source == "No data available"
    assert result.error == "Failed to fetch holdings from all sources"
    assert result.constituents == []
    assert result.holding_name == "Alpha Flexi Cap Fund"


async def test_empty_result_is_not_cached():
    a = _Source("A", Outcome.no_data())
    resolver = _resolver([a])
    await resolver.resolve("INF000A01", "Alpha")
    await resolver.resolve("INF000A01", "Alpha")
    assert a.calls == 2


async def test_empty_result_still_carries_registry_metadata():
    registry = _Registry(
        Outcome.success(RegistryInfo(scheme_code="120503", holding_name="Alpha - Direct", category="Flexi Cap"))
    )
    result = await _resolver([_Source("A", Outcome.no_data())], registry).resolve("INF000A01", "Alpha")
    assert result.holding_name == "Alpha - Direct"
    assert result.category == "Flexi Cap"
    assert result.scheme_code == "120503"


# --- cache ---

async def test_cache_hit_makes_no_source_calls():
    b = _Source("B", Outcome.success(_composition()))
    registry = _Registry(Outcome.no_data())
    resolver = _resolver([b], registry)
    first = await resolver.resolve("INF000A01", "Alpha")
    second = await resolver.resolve("INF000A01", "Alpha")
    assert second == first
    assert b.calls == 1
    assert registry.calls == 1


async def test_expired_cache_entry_triggers_new_resolution():
    clock = _Clock()
    b = _Source("B", Outcome.success(_composition()))
    resolver = _resolver([b], clock=clock)
    await resolver.resolve("INF000A01", "Alpha")
    clock.now = T0 + timedelta(hours=24, minutes=1)
    await resolver.resolve("INF000A01", "Alpha")
    assert b.calls == 2


# --- registry overlay ---

async def test_registry_fills_fields_provider_left_unset():
    registry = _Registry(Outcome.success(RegistryInfo(scheme_code="120503", house="Alpha MF", nav=12.3)))
    b = _Source("B", Outcome.success(_composition()))
    result = await _resolver([b], registry).resolve("INF000A01", "Alpha")
    assert result.house == "Alpha MF"
    assert result.nav == 12.3
    assert result.scheme_code == "120503"


async def test_provider_values_win_over_registry():
    registry = _Registry(Outcome.success(RegistryInfo(scheme_code="120503", category="Registry Cat")))
    b = _Source("B", Outcome.success(_composition(category="Provider Cat")))
    result = await _resolver([b], registry).resolve("INF000A01", "Alpha")
    assert result.category == "Provider Cat"


async def test_registry_failure_leaves_fields_unset():
    registry = _Registry(Outcome.error("down"))
    b = _Source("B", Outcome.success(_composition()))
    result = await _resolver([b], registry).resolve("INF000A01", "Alpha")
    assert result.scheme_code is None
    assert result.source == "B"


def test_source_labels_in_fallback_order():
    resolver = _resolver([_Source("A", Outcome.no_data()), _Source("B", Outcome.no_data())])
    assert resolver.source_labels == ["A", "B"]


async def test_raising_source_is_skipped():
    class _Broken(CompositionSource):
        label = "Broken"

        async def resolve(self, identifier, name):
            raise RuntimeError("adapter bug")

    b = _Source("B", Outcome.success(_composition()))
    assert (await _resolver([_Broken(), b]).resolve("INF000A01", "Alpha")).source == "B"
