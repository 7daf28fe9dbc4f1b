"""Fund composition domain models.

A Composition is the resolved breakdown of one fund into its constituent
positions, sector weights and asset-class weights.  Compositions are created
fresh by the resolver on every cache miss and treated as immutable once
cached; enrichment produces a modified copy that is written back explicitly.

Wire format is camelCase (capitalizationBand, resolvedAt, ...); Python
attributes stay snake_case.  Both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import SourceLabel

NO_SOURCE_ERROR = "Failed to fetch holdings from all sources"


class WireModel(BaseModel):
    """Base for models that cross the HTTP or cache boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def dedup_key(name: str) -> str:
    """Identity of a constituent across holdings: trimmed, lower-cased name."""
    return name.strip().lower()


class Constituent(WireModel):
    """One underlying position inside a fund.

    weight is the percentage of the fund (0–100) as reported by the provider.
    ratio / capitalization_band / ticker are filled in by ratio enrichment.
    """

    name: str = Field(min_length=1)
    ticker: str | None = None
    sector: str | None = None
    weight: float = Field(ge=0.0, le=100.0)
    value: float | None = None
    ratio: float | None = None
    capitalization_band: str | None = None

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.name)


class SectorWeight(WireModel):
    model_config = ConfigDict(frozen=True)

    label: str
    weight: float = Field(ge=0.0)


class AssetClassWeight(WireModel):
    model_config = ConfigDict(frozen=True)

    label: str
    weight: float = Field(ge=0.0)


class ValuationMetrics(WireModel):
    """Fund-level ratios; distinct from the per-constituent ratio."""

    pe_ratio: float | None = None
    pb_ratio: float | None = None
    dividend_yield: float | None = None
    turnover_ratio: float | None = None
    standard_deviation: float | None = None
    sharpe_ratio: float | None = None
    beta: float | None = None
    alpha: float | None = None
    average_capitalization: str | None = None

    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


class RegistryInfo(WireModel):
    """Baseline scheme metadata from the fund registry."""

    model_config = ConfigDict(frozen=True)

    scheme_code: str
    holding_name: str | None = None
    category: str | None = None
    house: str | None = None
    nav: float | None = None
    nav_date: str | None = None


class Composition(WireModel):
    """Resolved composition of one fund.

    source names the adapter that produced the data, or SourceLabel.NONE
    when every adapter failed (in which case error is set and constituents
    is empty).
    """

    holding_name: str
    identifier: str
    scheme_code: str | None = None
    category: str | None = None
    house: str | None = None
    aum: str | None = None
    expense_ratio: str | None = None
    nav: float | None = None
    nav_date: str | None = None
    constituents: list[Constituent] = Field(default_factory=list)
    sectors: list[SectorWeight] = Field(default_factory=list)
    asset_classes: list[AssetClassWeight] = Field(default_factory=list)
    valuation: ValuationMetrics | None = None
    resolved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: str
    error: str | None = None

    @property
    def has_data(self) -> bool:
        return bool(self.constituents)

    def overlay_registry(self, registry: RegistryInfo | None) -> Composition:
        """Return a copy with registry metadata filling fields the provider left unset."""
        if registry is None:
            return self
        return self.model_copy(
            update={
                "holding_name": self.holding_name or registry.holding_name or self.identifier,
                "scheme_code": self.scheme_code or registry.scheme_code,
                "category": self.category or registry.category,
                "house": self.house or registry.house,
                "nav": self.nav if self.nav is not None else registry.nav,
                "nav_date": self.nav_date or registry.nav_date,
            }
        )

    @classmethod
    def empty(
        cls,
        identifier: str,
        holding_name: str,
        resolved_at: datetime | None = None,
    ) -> Composition:
        """The explicit no-data result returned when no source succeeded."""
        return cls(
            holding_name=holding_name,
            identifier=identifier,
            resolved_at=resolved_at or datetime.now(timezone.utc),
            source=SourceLabel.NONE.value,
            error=NO_SOURCE_ERROR,
        )
