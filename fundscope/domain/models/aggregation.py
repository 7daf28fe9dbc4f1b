"""Cross-holding exposure aggregation models.

A HoldingInput is one fund position as reported by the brokerage (value is
last price × quantity).  AggregatedConstituent is one deduplicated underlying
stock with its portfolio-wide weight and the holdings that contribute to it.
"""

from __future__ import annotations

from pydantic import Field

from .composition import WireModel


class HoldingInput(WireModel):
    identifier: str = Field(min_length=1)
    display_name: str = Field(min_length=1)
    value: float = Field(ge=0.0)

    @classmethod
    def from_market_price(
        cls,
        identifier: str,
        display_name: str,
        last_price: float,
        quantity: float,
    ) -> HoldingInput:
        """Construct from a brokerage position (current value = price × quantity)."""
        return cls(identifier=identifier, display_name=display_name, value=last_price * quantity)


class HoldingContribution(WireModel):
    """How much of an aggregated constituent one holding accounts for.

    weight is the constituent's percentage inside that holding; value is the
    rupee amount it contributes.
    """

    holding_name: str
    weight: float
    value: float


class AggregatedConstituent(WireModel):
    key: str
    name: str
    ticker: str | None = None
    sector: str | None = None
    ratio: float | None = None
    capitalization_band: str | None = None
    total_value: float = 0.0
    total_weight: float = 0.0
    contributions: list[HoldingContribution] = Field(default_factory=list)


class AggregateRequest(WireModel):
    holdings: list[HoldingInput] = Field(default_factory=list)


class AggregationResult(WireModel):
    constituents: list[AggregatedConstituent] = Field(default_factory=list)
    total_constituents: int = 0
    total_portfolio_value: float = 0.0
    total_holdings: int = 0
