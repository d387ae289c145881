"""
Storefront browse filter — in-memory filtering and sorting of catalog items.

Works on any objects exposing the Product attributes (ORM rows or plain
records). Filters apply in a fixed order: search, category, price range,
condition, brand, in-stock, then sort.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Protocol, Sequence

from domain.constants import BROWSE_MAX_PRICE, BROWSE_MIN_PRICE
from domain.enums import BrowseSort


class Browsable(Protocol):
    name: str
    description: str
    brand: str
    price: float
    condition: str
    category_id: int
    in_stock: bool
    rating: float
    created_at: datetime | None


@dataclass
class BrowseFilters:
    category: int | None = None
    price_range: tuple[float, float] = (BROWSE_MIN_PRICE, BROWSE_MAX_PRICE)
    condition: list[str] = field(default_factory=list)
    brand: list[str] = field(default_factory=list)
    in_stock: bool = False


def _matches_search(item: Browsable, needle: str) -> bool:
    return (
        needle in (item.name or "").lower()
        or needle in (item.description or "").lower()
        or needle in (item.brand or "").lower()
    )


def _sort(items: list, sort_by: BrowseSort) -> list:
    if sort_by == BrowseSort.NAME:
        return sorted(items, key=lambda p: (p.name or "").casefold())
    if sort_by == BrowseSort.PRICE_LOW:
        return sorted(items, key=lambda p: p.price)
    if sort_by == BrowseSort.PRICE_HIGH:
        return sorted(items, key=lambda p: p.price, reverse=True)
    if sort_by == BrowseSort.RATING:
        return sorted(items, key=lambda p: p.rating, reverse=True)
    # newest first; undated items sink to the end
    return sorted(items, key=lambda p: p.created_at or datetime.min, reverse=True)


def filter_products(
    products: Iterable[Browsable],
    filters: BrowseFilters | None = None,
    *,
    search_query: str = "",
    sort_by: BrowseSort | str = BrowseSort.NEWEST,
) -> list:
    """
    Apply storefront filters and sort.

    Args:
        products: Candidate items (not mutated)
        filters: Category / price range / condition / brand / in-stock filters
        search_query: Case-insensitive substring over name, description, brand
        sort_by: One of name, price-low, price-high, rating, newest

    Returns:
        New list of matching items in sorted order (stable for ties)
    """
    filters = filters or BrowseFilters()
    sort_by = BrowseSort(sort_by)
    filtered = list(products)

    if search_query:
        needle = search_query.lower()
        filtered = [p for p in filtered if _matches_search(p, needle)]

    if filters.category:
        filtered = [p for p in filtered if p.category_id == filters.category]

    low, high = filters.price_range
    filtered = [p for p in filtered if low <= p.price <= high]

    if filters.condition:
        wanted = set(filters.condition)
        filtered = [p for p in filtered if p.condition in wanted]

    if filters.brand:
        wanted = set(filters.brand)
        filtered = [p for p in filtered if p.brand in wanted]

    if filters.in_stock:
        filtered = [p for p in filtered if p.in_stock]

    return _sort(filtered, sort_by)


def distinct_brands(products: Sequence[Browsable]) -> list[str]:
    """Sorted brand names present in the given items (drives the brand facet)."""
    return sorted({p.brand for p in products if p.brand}, key=str.casefold)
