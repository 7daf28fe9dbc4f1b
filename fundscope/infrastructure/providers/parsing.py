"""Shared parsing helpers for provider responses.

Providers expose the same concept under several field names (company_name,
companyName, instrument_name, ...).  Each adapter declares a FieldMap from
canonical field to candidate provider keys; map_constituents / map_weights
apply it and validate every row at the adapter boundary, dropping rows that
do not fit the canonical schema.

HtmlDocument collects tables and list items from HTML pages, together with
the #id / .class / [attr=value] labels of each element and its ancestors, so
adapters can select them with simple selector strings.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from fundscope.domain.models.composition import Constituent

logger = logging.getLogger(__name__)

FieldMap = Mapping[str, Sequence[str]]

W = TypeVar("W", bound=BaseModel)

_NUMBER = re.compile(r"-?\d[\d,]*(?:\.\d+)?|-?\.\d+")
_PLACEHOLDER = re.compile(r"^(grand\s+)?total\b", re.IGNORECASE)
_NEXT_DATA = re.compile(r'<script id="__NEXT_DATA__"[^>]*>(.+?)</script>', re.DOTALL)


# ---------------------------------------------------------------------------
# Field mapping
# ---------------------------------------------------------------------------


def pick(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the first value among keys that is neither missing, None nor ''."""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def to_float(value: Any) -> float | None:
    """Coerce 12.5, "12.5", "12.5%" or "1,234.5" to float; None when impossible."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _NUMBER.search(value)
        if match:
            return float(match.group(0).replace(",", ""))
    return None


def to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def is_placeholder(name: str) -> bool:
    return _PLACEHOLDER.match(name.strip()) is not None


def map_constituents(rows: Iterable[Any], field_map: FieldMap) -> list[Constituent]:
    """Map provider rows to Constituents.

    field_map keys: name, weight, and optionally sector, ticker.  Rows that are
    not mappings, have no name, are placeholders, have weight ≤ 0 or fail
    validation are dropped.
    """
    constituents: list[Constituent] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        name = to_text(pick(row, field_map["name"]))
        weight = to_float(pick(row, field_map["weight"])) or 0.0
        if not name or weight <= 0 or is_placeholder(name):
            continue
        try:
            constituents.append(
                Constituent(
                    name=name,
                    weight=weight,
                    sector=to_text(pick(row, field_map.get("sector", ()))),
                    ticker=to_text(pick(row, field_map.get("ticker", ()))),
                )
            )
        except ValidationError as exc:
            logger.debug("Dropping constituent row %r: %s", name, exc)
    return constituents


def map_weights(
    rows: Iterable[Any],
    field_map: FieldMap,
    model: type[W],
    default_label: str = "Other",
) -> list[W]:
    """Map provider rows to label/weight models (SectorWeight, AssetClassWeight)."""
    weights: list[W] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        weight = to_float(pick(row, field_map["weight"])) or 0.0
        if weight <= 0:
            continue
        label = to_text(pick(row, field_map["label"])) or default_label
        try:
            weights.append(model(label=label, weight=weight))
        except ValidationError as exc:
            logger.debug("Dropping weight row %r: %s", label, exc)
    return weights


def as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def prefer_match(items: Sequence[Any], identifier: str, key: str = "isin") -> Any:
    """The first item whose key equals identifier, else the first item."""
    for item in items:
        if isinstance(item, Mapping) and item.get(key) == identifier:
            return item
    return items[0] if items else None


def extract_next_data(html: str) -> dict | None:
    """Parse the JSON payload of a Next.js __NEXT_DATA__ script tag."""
    match = _NEXT_DATA.search(html)
    if not match:
        return None
    try:
        data = json.loads(match.group(1))
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

_VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)


@dataclass
class HtmlCell:
    text: str
    link_text: str = ""


@dataclass
class HtmlTable:
    labels: frozenset[str]
    rows: list[list[HtmlCell]] = field(default_factory=list)


@dataclass
class HtmlListItem:
    labels: frozenset[str]
    text: str


def _labels(tag: str, attrs: Mapping[str, str | None]) -> set[str]:
    labels = {tag}
    if attrs.get("id"):
        labels.add(f"#{attrs['id']}")
    for cls in (attrs.get("class") or "").split():
        labels.add(f".{cls}")
    for name, value in attrs.items():
        if name.startswith("data-") and value is not None:
            labels.add(f'[{name}="{value}"]')
    return labels


class HtmlDocument(HTMLParser):
    """Collects table body rows and list items from an HTML page.

    Header rows (in thead, or rows without td cells) are skipped.
    """

    def __init__(self, html: str) -> None:
        super().__init__(convert_charrefs=True)
        self.tables: list[HtmlTable] = []
        self.list_items: list[HtmlListItem] = []
        self._stack: list[tuple[str, frozenset[str]]] = []
        self._open_tables: list[HtmlTable] = []
        self._row: list[HtmlCell] | None = None
        self._cell: list[str] | None = None
        self._link: list[str] | None = None
        self._link_done = False
        self._items: list[list[str]] = []
        self._in_thead = 0
        self.feed(html)
        self.close()

    def _ancestor_labels(self) -> frozenset[str]:
        labels: set[str] = set()
        for _, own in self._stack:
            labels |= own
        return frozenset(labels)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        own = frozenset(_labels(tag, dict(attrs)))
        if tag not in _VOID_TAGS:
            self._stack.append((tag, own))
        if tag == "table":
            table = HtmlTable(labels=self._ancestor_labels())
            self.tables.append(table)
            self._open_tables.append(table)
        elif tag == "thead":
            self._in_thead += 1
        elif tag == "tr" and self._open_tables and not self._in_thead:
            self._row = []
        elif tag == "td" and self._row is not None:
            self._cell = []
            self._link = None
            self._link_done = False
        elif tag == "a" and self._cell is not None and not self._link_done:
            self._link = []
        elif tag == "li":
            self._items.append([])

    def handle_endtag(self, tag: str) -> None:
        if tag == "a" and self._link is not None:
            self._link_done = True
        elif tag == "td" and self._cell is not None and self._row is not None:
            link_text = " ".join("".join(self._link or []).split())
            self._row.append(HtmlCell(text=" ".join("".join(self._cell).split()), link_text=link_text))
            self._cell = None
            self._link = None
        elif tag == "tr" and self._row is not None:
            if self._row and self._open_tables:
                self._open_tables[-1].rows.append(self._row)
            self._row = None
        elif tag == "thead" and self._in_thead:
            self._in_thead -= 1
        elif tag == "table" and self._open_tables:
            self._open_tables.pop()
        elif tag == "li" and self._items:
            text = " ".join("".join(self._items.pop()).split())
            if text:
                self.list_items.append(HtmlListItem(labels=self._ancestor_labels(), text=text))

        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index][0] == tag:
                del self._stack[index:]
                break

    def handle_data(self, data: str) -> None:
        if self._cell is not None:
            self._cell.append(data)
            if self._link is not None and not self._link_done:
                self._link.append(data)
        for item in self._items:
            item.append(data)

    def select_tables(self, selector: str) -> list[HtmlTable]:
        """Tables labelled with selector (#id, .class or [data-x="y"]) on themselves or an ancestor."""
        return [t for t in self.tables if selector in t.labels]

    def select_items(self, selector: str | None = None) -> list[HtmlListItem]:
        if selector is None:
            return list(self.list_items)
        return [i for i in self.list_items if selector in i.labels]


def table_rows(document: HtmlDocument, selectors: Sequence[str]) -> list[list[HtmlCell]]:
    """Rows of the first selector that matches a table with at least one row."""
    for selector in selectors:
        rows = [row for table in document.select_tables(selector) for row in table.rows]
        if rows:
            return rows
    return []


def rows_to_records(rows: Iterable[Sequence[HtmlCell]]) -> list[dict[str, str]]:
    """Turn table rows into {name, weight} records (first cell, last cell)."""
    records = []
    for cells in rows:
        if len(cells) < 2:
            continue
        first = cells[0]
        records.append({"name": first.link_text or first.text, "weight": cells[-1].text})
    return records
