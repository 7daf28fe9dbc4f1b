"""Tests for fundscope/domain/models/composition.py."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from fundscope.domain.models.composition import (
    NO_SOURCE_ERROR,
    Composition,
    Constituent,
    RegistryInfo,
    SectorWeight,
    ValuationMetrics,
    dedup_key,
)
from fundscope.domain.models.enums import SourceLabel


def _composition(**overrides):
    defaults = {
        "holding_name": "Alpha Flexi Cap Fund",
        "identifier": "INF000A01",
        "constituents": [Constituent(name="Acme Ltd", weight=25.0)],
        "source": SourceLabel.GROWW.value,
    }
    defaults.update(overrides)
    return Composition(**defaults)


def _registry(**overrides):
    defaults = {
        "scheme_code": "120503",
        "holding_name": "Alpha Flexi Cap Fund - Direct Growth",
        "category": "Equity Scheme - Flexi Cap Fund",
        "house": "Alpha Mutual Fund",
        "nav": 101.5,
        "nav_date": "17-10-2026",
    }
    defaults.update(overrides)
    return RegistryInfo(**defaults)


# --- Constituent ---

def test_constituent_weight_above_hundred_raises():
    with pytest.raises(ValidationError):
        Constituent(name="Acme Ltd", weight=100.5)


def test_constituent_negative_weight_raises():
    with pytest.raises(ValidationError):
        Constituent(name="Acme Ltd", weight=-1.0)


def test_constituent_empty_name_raises():
    with pytest.raises(ValidationError):
        Constituent(name="", weight=1.0)


def test_constituent_dedup_key_trims_and_lowercases():
    assert Constituent(name="  ACME Ltd ", weight=1.0).dedup_key == "acme ltd"


def test_dedup_key_matches_across_spellings():
    assert dedup_key(" Acme Ltd") == dedup_key("ACME LTD ")


def test_constituent_serialises_camel_case():
    data = Constituent(name="Acme Ltd", weight=1.0, capitalization_band="₹1,234 Cr").model_dump(
        by_alias=True
    )
    assert data["capitalizationBand"] == "₹1,234 Cr"


def test_constituent_accepts_camel_case_input():
    c = Constituent.model_validate({"name": "Acme Ltd", "weight": 1.0, "capitalizationBand": "Large"})
    assert c.capitalization_band == "Large"


# --- weights / metrics ---

def test_sector_weight_is_frozen():
    sector = SectorWeight(label="Financials", weight=30.0)
    with pytest.raises(ValidationError):
        sector.weight = 10.0  # type: ignore[misc]


def test_valuation_metrics_empty_when_nothing_set():
    assert ValuationMetrics().is_empty()


def test_valuation_metrics_not_empty_with_one_field():
    assert not ValuationMetrics(beta=0.9).is_empty()


# --- Composition ---

def test_composition_has_data_with_constituents():
    assert _composition().has_data


def test_composition_without_constituents_has_no_data():
    assert not _composition(constituents=[]).has_data


def test_empty_composition_carries_sentinel_source_and_error():
    empty = Composition.empty("INF000A01", "Alpha Flexi Cap Fund")
    assert empty.source == "No data available"
    assert empty.error == NO_SOURCE_ERROR
    assert empty.constituents == []


def test_empty_composition_uses_given_timestamp():
    at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert Composition.empty("X", "Y", resolved_at=at).resolved_at == at


def test_overlay_registry_fills_missing_fields():
    result = _composition().overlay_registry(_registry())
    assert result.scheme_code == "120503"
    assert result.category == "Equity Scheme - Flexi Cap Fund"
    assert result.house == "Alpha Mutual Fund"
    assert result.nav == 101.5
    assert result.nav_date == "17-10-2026"


def test_overlay_registry_keeps_provider_values():
    result = _composition(category="Flexi Cap", nav=99.0).overlay_registry(_registry())
    assert result.category == "Flexi Cap"
    assert result.nav == 99.0


def test_overlay_registry_keeps_provider_holding_name():
    result = _composition().overlay_registry(_registry())
    assert result.holding_name == "Alpha Flexi Cap Fund"


def test_overlay_registry_none_returns_same_object():
    composition = _composition()
    assert composition.overlay_registry(None) is composition


def test_overlay_registry_does_not_mutate_original():
    composition = _composition()
    composition.overlay_registry(_registry())
    assert composition.scheme_code is None


def test_composition_round_trips_through_wire_format():
    composition = _composition(valuation=ValuationMetrics(pe_ratio=21.3))
    data = composition.model_dump(mode="json", by_alias=True)
    assert "resolvedAt" in data
    assert Composition.model_validate(data) == composition
