"""Domain enumerations.

All string-valued enums use str mixin so they serialize cleanly to JSON
and remain comparable to plain strings (FastAPI / Pydantic default behaviour).
"""

from enum import Enum


class OutcomeStatus(str, Enum):
    """Result variant returned by every external data source."""

    SUCCESS = "success"
    NO_DATA = "no_data"
    PROVIDER_ERROR = "provider_error"


class SourceLabel(str, Enum):
    """Labels stamped on a Composition's source field.

    Declaration order is not the fallback order; the resolver's adapter
    list is.
    """

    GROWW = "Groww"
    TICKERTAPE = "Tickertape"
    MONEYCONTROL = "Moneycontrol"
    VALUE_RESEARCH = "Value Research"
    ET_MONEY = "ET Money"
    MFAPI = "MFAPI"
    SCREENER = "Screener"
    NSE = "NSE"
    NONE = "No data available"
