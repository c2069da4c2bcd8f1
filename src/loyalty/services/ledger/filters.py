"""Filter state for the customer list and normalization of raw user input."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union

Bound = Optional[Union[int, float]]

_TRUE_VALUES = {"1", "true", "yes", "on"}

# Accepted spellings per field, flat snake_case first.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "search": ("search", "q", "query"),
    "start_date": ("start_date", "startDate"),
    "end_date": ("end_date", "endDate"),
    "min_total": ("min_total", "minTotal"),
    "max_total": ("max_total", "maxTotal"),
    "min_claimed": ("min_claimed", "minClaimed"),
    "max_claimed": ("max_claimed", "maxClaimed"),
    "min_unclaimed": ("min_unclaimed", "minUnclaimed"),
    "max_unclaimed": ("max_unclaimed", "maxUnclaimed"),
    "has_claimed": ("has_claimed", "hasClaimed"),
    "has_eligible_claims": ("has_eligible_claims", "hasEligibleClaims"),
}

_SECTIONS = ("date_range", "dateRange", "points", "claim_status", "claimStatus")


@dataclass(frozen=True)
class DateRange:
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class PointsRange:
    min_total: Bound = None
    max_total: Bound = None
    min_claimed: Bound = None
    max_claimed: Bound = None
    min_unclaimed: Bound = None
    max_unclaimed: Bound = None


@dataclass(frozen=True)
class ClaimStatus:
    has_claimed: bool = False
    has_eligible_claims: bool = False


@dataclass(frozen=True)
class FilterState:
    """Search text plus every list filter. ``None`` bounds are unconstrained."""

    search: str = ""
    date_range: DateRange = field(default_factory=DateRange)
    points: PointsRange = field(default_factory=PointsRange)
    claim_status: ClaimStatus = field(default_factory=ClaimStatus)

    def to_key_dict(self) -> dict[str, Any]:
        """Filter values (without search) as plain JSON-friendly data."""
        return {
            "date_range": {
                "start": self.date_range.start.isoformat() if self.date_range.start else None,
                "end": self.date_range.end.isoformat() if self.date_range.end else None,
            },
            "points": {f.name: parse_bound(getattr(self.points, f.name)) for f in fields(PointsRange)},
            "claim_status": {
                "has_claimed": self.claim_status.has_claimed,
                "has_eligible_claims": self.claim_status.has_eligible_claims,
            },
        }


def parse_bound(value: Any) -> Bound:
    """Convert a user-entered number; empty, non-numeric or non-finite input is unconstrained."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    # 5 and 5.0 must be the same bound.
    return int(number) if number.is_integer() else number


def parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


def _flatten(raw: Mapping[str, Any]) -> dict[str, Any]:
    flat = {key: value for key, value in raw.items() if key not in _SECTIONS}
    for section in _SECTIONS:
        nested = raw.get(section)
        if isinstance(nested, Mapping):
            for key, value in nested.items():
                flat.setdefault(key, value)
    return flat


def _pick(flat: Mapping[str, Any], name: str) -> Any:
    for alias in _FIELD_ALIASES[name]:
        if alias in flat:
            return flat[alias]
    return None


def normalize(raw: Optional[Mapping[str, Any]]) -> FilterState:
    """Build a :class:`FilterState` from flat or nested raw input."""
    if not raw:
        return FilterState()
    flat = _flatten(raw)
    search = _pick(flat, "search")
    return FilterState(
        search=str(search).strip() if search is not None else "",
        date_range=DateRange(
            start=parse_date(_pick(flat, "start_date")),
            end=parse_date(_pick(flat, "end_date")),
        ),
        points=PointsRange(**{f.name: parse_bound(_pick(flat, f.name)) for f in fields(PointsRange)}),
        claim_status=ClaimStatus(
            has_claimed=parse_flag(_pick(flat, "has_claimed")),
            has_eligible_claims=parse_flag(_pick(flat, "has_eligible_claims")),
        ),
    )


def is_empty(filters: FilterState) -> bool:
    """True when neither search nor any filter constrains the list."""
    return (
        not filters.search.strip()
        and filters.date_range == DateRange()
        and filters.points == PointsRange()
        and filters.claim_status == ClaimStatus()
    )
