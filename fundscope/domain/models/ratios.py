"""Per-constituent valuation ratio models."""

from __future__ import annotations

from pydantic import Field

from .composition import Constituent, WireModel


class RatioQuote(WireModel):
    """Best-effort enrichment result for one constituent name.

    Every field other than name may be absent; a quote with no fields set
    means every ratio source failed for that name.
    """

    name: str
    ratio: float | None = None
    capitalization_band: str | None = None
    ticker: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.ratio is None and self.capitalization_band is None and self.ticker is None

    def apply_to(self, constituent: Constituent) -> Constituent:
        """Return a copy of constituent with this quote's fields merged in.

        Values already on the constituent survive when the quote lacks them.
        """
        return constituent.model_copy(
            update={
                "ratio": self.ratio if self.ratio is not None else constituent.ratio,
                "capitalization_band": self.capitalization_band or constituent.capitalization_band,
                "ticker": self.ticker or constituent.ticker,
            }
        )


class RatioBatchRequest(WireModel):
    names: list[str] = Field(default_factory=list)


class RatioBatchResponse(WireModel):
    results: list[RatioQuote] = Field(default_factory=list)


class EnrichRequest(WireModel):
    constituents: list[Constituent] = Field(default_factory=list)


class EnrichResponse(WireModel):
    constituents: list[Constituent] = Field(default_factory=list)
    weighted_ratio: float | None = None
