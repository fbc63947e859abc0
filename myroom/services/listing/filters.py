# myroom/services/listing/filters.py
"""
Pure predicates over listing records.

Records are anything exposing the listing attributes (ORM rows or
ListingRead schemas). Nothing here touches the store, so every function is
safe to re-run on each live snapshot.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from myroom.core.utils import MILLIS_PER_DAY, current_millis
from myroom.models.enums import ListingStatus

T = TypeVar("T")

NEW_LISTING_DAYS = 7

_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class SearchCriteria:
    """Student search box values. Empty strings mean "no filter"."""

    college: str = ""
    budget: str = ""
    safety: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.college or self.budget or self.safety)


# ---------------------------------------------------------------------- #
# Numeric parsing
# ---------------------------------------------------------------------- #

def to_number(text: str) -> float:
    """
    Convert one side of a budget string to a number.

    Blank text is 0 and anything that is not a plain decimal literal is NaN.
    """
    text = text.strip()
    if not text:
        return 0.0
    if not _DECIMAL_RE.match(text):
        return math.nan
    return float(text)


def parse_rent(rent) -> Optional[int]:
    """Leading integer of the rent value ("4000/month" -> 4000), or None."""
    if rent is None:
        return None
    if isinstance(rent, (int, float)) and not isinstance(rent, bool):
        if isinstance(rent, float) and not math.isfinite(rent):
            return None
        return int(rent)
    match = _LEADING_INT_RE.match(str(rent))
    if not match:
        return None
    return int(match.group(1))


def _present(value: Optional[float]) -> bool:
    # 0 and NaN both count as "no bound"
    return value is not None and not math.isnan(value) and value != 0


def parse_budget(budget: str) -> Tuple[Optional[float], Optional[float]]:
    """
    Split "min-max" into bounds.

    "3000-5000" -> (3000, 5000), "3000" -> (3000, None), "-5000" -> (None, 5000).
    A side that is blank, zero or not a number is None, so "abc" yields
    (None, None) and applies no constraint.
    """
    parts = budget.split("-")
    low = to_number(parts[0])
    high = to_number(parts[1]) if len(parts) > 1 else None
    return (low if _present(low) else None, high if _present(high) else None)


# ---------------------------------------------------------------------- #
# Predicates
# ---------------------------------------------------------------------- #

def matches_budget(rent, budget: str) -> bool:
    """
    True if ``rent`` falls within ``budget``.

    An empty budget always matches. With any budget text, a rent that does
    not parse as a number never matches.
    """
    if not budget:
        return True

    low, high = parse_budget(budget)
    value = parse_rent(rent)
    if value is None:
        return False

    if low is not None and high is not None:
        return low <= value <= high
    if low is not None:
        return value >= low
    if high is not None:
        return value <= high
    return True


def matches_search(listing, criteria: SearchCriteria) -> bool:
    if criteria.college and criteria.college.lower() not in (listing.location or "").lower():
        return False
    if not matches_budget(listing.rent, criteria.budget):
        return False
    if criteria.safety and criteria.safety.lower() not in (listing.amenities or "").lower():
        return False
    return True


def search_listings(listings: Iterable[T], criteria: SearchCriteria) -> List[T]:
    """Listings matching every given criterion, in input order."""
    return [listing for listing in listings if matches_search(listing, criteria)]


def is_visible_to_students(listing) -> bool:
    return listing.status == ListingStatus.APPROVED and not listing.is_booked


def visible_listings(listings: Iterable[T]) -> List[T]:
    return [listing for listing in listings if is_visible_to_students(listing)]


def is_new_listing(
    timestamp: Optional[int],
    now: Optional[int] = None,
    days: int = NEW_LISTING_DAYS,
) -> bool:
    """True if the listing was created within the last ``days`` days."""
    if not timestamp:
        return False
    if now is None:
        now = current_millis()
    return timestamp > now - days * MILLIS_PER_DAY


def average_rating(ratings: Sequence[int]) -> float:
    """Mean rating rounded to one decimal; 0 when there are no reviews."""
    if not ratings:
        return 0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


__all__ = [
    "SearchCriteria",
    "to_number",
    "parse_rent",
    "parse_budget",
    "matches_budget",
    "matches_search",
    "search_listings",
    "is_visible_to_students",
    "visible_listings",
    "is_new_listing",
    "average_rating",
]
