"""Tests for fundscope/domain/models/outcome.py and cache key helpers."""

from datetime import datetime, timedelta, timezone

from fundscope.domain.models.cache import CacheEntry, composition_key, ratio_key
from fundscope.domain.models.enums import OutcomeStatus
from fundscope.domain.models.outcome import Outcome

T0 = datetime(2026, 10, 1, tzinfo=timezone.utc)


# --- Outcome ---

def test_success_is_ok_and_carries_value():
    outcome = Outcome.success(42)
    assert outcome.ok
    assert outcome.value == 42


def test_no_data_is_not_ok():
    outcome = Outcome.no_data()
    assert not outcome.ok
    assert outcome.status == OutcomeStatus.NO_DATA


def test_error_carries_detail():
    outcome = Outcome.error("timeout")
    assert outcome.status == OutcomeStatus.PROVIDER_ERROR
    assert outcome.detail == "timeout"


# --- keys ---

def test_composition_key_prefix():
    assert composition_key("INF000A01") == "composition:INF000A01"


def test_ratio_key_normalises_name():
    assert ratio_key("  Acme LTD ") == "ratio:acme ltd"


# --- CacheEntry ---

def test_entry_fresh_just_inside_ttl():
    entry = CacheEntry(data=1, created_at=T0)
    assert not entry.is_expired(T0 + timedelta(hours=24), timedelta(hours=24))


def test_entry_expired_past_ttl():
    entry = CacheEntry(data=1, created_at=T0)
    assert entry.is_expired(T0 + timedelta(hours=24, seconds=1), timedelta(hours=24))
