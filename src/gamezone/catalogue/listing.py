"""Product search: filters, text match, sort and pagination.

Exact-match filters go to the repository; price range, free-text search and
ordering are applied to the matching products in memory, the same way for
every provider.
"""

import math
import re
from dataclasses import dataclass, field

from gamezone.catalogue.product import Product
from gamezone.utils.time import sort_key

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100

SORT_PRICE_LOW = "price-low"
SORT_PRICE_HIGH = "price-high"
SORT_RATING = "rating"
SORT_NEWEST = "newest"
SORT_OPTIONS = (SORT_PRICE_LOW, SORT_PRICE_HIGH, SORT_RATING, SORT_NEWEST)


@dataclass
class ProductFilters:
    platform: str | None = None
    condition: str | None = None
    category: str | None = None
    featured: bool = False
    deals: bool = False
    min_price: float | None = None
    max_price: float | None = None
    search: str | None = None
    sort: str | None = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    def exact_matches(self) -> dict:
        matches = {}
        for name in ("platform", "condition", "category"):
            value = getattr(self, name)
            if value:
                matches[name] = value
        if self.featured:
            matches["is_featured"] = True
        if self.deals:
            matches["is_deal"] = True
        return matches


@dataclass
class ProductPage:
    products: list[Product] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0
    total_products: int = 0


def search_terms(text: str | None) -> list[str]:
    return [term for term in re.split(r"\W+", (text or "").lower()) if term]


def matches_text(product: Product, terms: list[str]) -> bool:
    """True when any term appears in the name, description or a tag."""
    if not terms:
        return True
    haystack = " ".join([product.name or "", product.description or "", *product.tag_list]).lower()
    words = set(search_terms(haystack))
    return any(term in words for term in terms)


def in_price_range(product: Product, min_price: float | None, max_price: float | None) -> bool:
    if min_price is not None and product.price < min_price:
        return False
    if max_price is not None and product.price > max_price:
        return False
    return True


def sort_products(products: list[Product], sort: str | None) -> list[Product]:
    if sort == SORT_PRICE_LOW:
        return sorted(products, key=lambda p: p.price)
    if sort == SORT_PRICE_HIGH:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort == SORT_RATING:
        return sorted(products, key=lambda p: p.rating.average if p.rating else 0.0, reverse=True)
    return sorted(products, key=lambda p: sort_key(p.created_at), reverse=True)


def paginate(products: list[Product], page: int, limit: int) -> ProductPage:
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    total = len(products)
    start = (page - 1) * limit
    return ProductPage(
        products=products[start : start + limit],
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_products=total,
    )


def search(repository, filters: ProductFilters) -> ProductPage:
    """Run ``filters`` against ``repository`` (a ``ProductRepository``)."""
    candidates = repository.active(**filters.exact_matches())
    terms = search_terms(filters.search)
    matching = [
        product
        for product in candidates
        if in_price_range(product, filters.min_price, filters.max_price) and matches_text(product, terms)
    ]
    return paginate(sort_products(matching, filters.sort), filters.page, filters.limit)
