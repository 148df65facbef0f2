"""Browsing the catalogue of nearby stores one page at a time."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import List

from .nearby import find_stores_to_query
from .queries import Queries
from .responses import PaginatedProduct
from .search import ProductSearch
from .shopping_list import _cheapest_per_store, _group_by_product, _number

ITEMS_PER_PAGE = 100


@dataclass
class PaginatedItemRequest:
    """A page number (from 0) and where the user is."""

    page: int
    latitude: float
    longitude: float

    @classmethod
    def from_dict(cls, data):
        """Build a request from decoded JSON; raise ``ValueError`` if malformed."""
        if not isinstance(data, Mapping):
            raise ValueError("request must be a JSON object")
        page = data.get("page")
        if isinstance(page, bool) or not isinstance(page, int):
            raise ValueError("'page' must be an integer")
        if not -(2 ** 31) <= page < 2 ** 31:
            raise ValueError("'page' is out of range")
        return cls(
            page=page,
            latitude=_number(data, "latitude"),
            longitude=_number(data, "longitude"),
        )


@dataclass
class PaginatedItemResponse:
    items: List[PaginatedProduct] = field(default_factory=list)

    def to_dict(self):
        return {"items": [item.to_dict() for item in self.items]}


def get_list_for_page(request, db):
    """Products on the requested page, each with its prices at nearby stores."""
    nearby = find_stores_to_query(Queries(db), request.latitude, request.longitude)
    if not nearby:
        return PaginatedItemResponse(items=[])
    store_ids = [store.id for store in nearby]
    store_map = {store.id: store for store in nearby}
    rows = ProductSearch(db).get_paginated_products(store_ids, request.page, ITEMS_PER_PAGE)

    items = []
    for group in _group_by_product(rows).values():
        group.sort(key=lambda p: p.price)
        first = group[0]
        items.append(
            PaginatedProduct(
                product_name=first.product_name,
                brand=first.brand,
                size_value=first.size_value,
                size_unit=first.size_unit,
                supermarket_info=_cheapest_per_store(group, store_map),
            )
        )
    return PaginatedItemResponse(items=items)