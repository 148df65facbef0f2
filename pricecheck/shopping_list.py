"""Matching a shopping list against nearby store prices with hybrid ranking.

Candidates come from category matches and BM25 full-text search; each is
scored from its keyword score (40%), semantic similarity (20%) and price (40%),
then grouped by product so every product lists its prices across stores.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import List

from .nearby import find_stores_to_query
from .queries import Queries
from .responses import MatchedProduct, ShoppingListItem, SupermarketInfo
from .search import ProductSearch
from .semantic import Product, find_matching_products_semantic

TOP_N_MATCHES = 5
BM25_CANDIDATE_LIMIT = 100
BM25_WEIGHT = 0.4
SEMANTIC_WEIGHT = 0.2
PRICE_WEIGHT = 0.4
CATEGORY_MATCH_SCORE = 0.7
KEYWORD_MATCH_SCORE = 0.5


def _number(data, name):
    value = data.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{name}' must be a number")
    return float(value)


def _round_half_away(value, digits):
    scale = 10 ** digits
    return math.copysign(math.floor(abs(value) * scale + 0.5), value) / scale


@dataclass
class ShoppingListRequest:
    """Items to look for and where the user is."""

    items: List[str]
    latitude: float
    longitude: float

    @classmethod
    def from_dict(cls, data):
        """Build a request from decoded JSON; raise ``ValueError`` if malformed."""
        if not isinstance(data, Mapping):
            raise ValueError("request must be a JSON object")
        items = data.get("items")
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise ValueError("'items' must be a list of strings")
        return cls(
            items=list(items),
            latitude=_number(data, "latitude"),
            longitude=_number(data, "longitude"),
        )


@dataclass
class ShoppingListResponse:
    items: List[ShoppingListItem] = field(default_factory=list)

    def to_dict(self):
        return {"items": [item.to_dict() for item in self.items]}


def _candidate_key(product):
    return (product.product_name, product.store_id, product.price)


def _group_key(product):
    return (product.product_name.lower(), product.size_value, product.size_unit.lower())


def _as_product(row, score):
    return Product(
        product_name=row.product_name,
        brand=row.brand,
        size_value=row.size_value,
        size_unit=row.size_unit,
        price=row.price,
        supermarket=row.supermarket,
        store_name=row.store_name,
        store_id=row.store_id,
        store_latitude=row.store_latitude,
        store_longitude=row.store_longitude,
        similarity_score=score,
    )


def _group_by_product(products):
    groups = {}
    for product in products:
        groups.setdefault(_group_key(product), []).append(product)
    return groups


def _cheapest_per_store(group, store_map):
    """One price per store (the cheapest), sorted cheapest first."""
    by_store = {}
    for product in sorted(group, key=lambda p: p.price):
        store = store_map.get(product.store_id)
        distance = store.distance_km if store is not None else 0.0
        info = SupermarketInfo(
            supermarket=product.supermarket,
            store_name=product.store_name,
            distance_km=_round_half_away(distance, 1),
            price=product.price,
        )
        existing = by_store.get(product.store_id)
        if existing is None or info.price < existing.price:
            by_store[product.store_id] = info
    return sorted(by_store.values(), key=lambda info: info.price)


def _bm25_candidates(search_term, search, store_ids):
    results = search.search_products_bm25(search_term, store_ids, BM25_CANDIDATE_LIMIT)
    if not results:
        return [
            _as_product(row, KEYWORD_MATCH_SCORE)
            for row in search.search_products_in_stores(search_term, store_ids)
        ]
    scores = [r.bm25_score for r in results]
    lowest = min(scores)
    spread = max(abs(max(scores) - lowest), 0.001)
    return [_as_product(r, 1.0 - (r.bm25_score - lowest) / spread) for r in results]


def _process_single_item(search_term, search, store_ids, store_map):
    candidates = {}
    category_ids = search.find_matching_category_ids(search_term)
    if category_ids:
        for row in search.search_products_in_categories_and_stores(category_ids, store_ids):
            candidates.setdefault(_candidate_key(row), _as_product(row, CATEGORY_MATCH_SCORE))
    for product in _bm25_candidates(search_term, search, store_ids):
        candidates.setdefault(_candidate_key(product), product)

    if not candidates:
        return ShoppingListItem(search_term=search_term, top_matches=[])

    products = list(candidates.values())
    semantic_scores = {
        _candidate_key(match): match.similarity_score
        for match in find_matching_products_semantic(search_term, products, 0.0)
    }
    max_price = max([1.0, *(p.price for p in products)])

    scored = []
    for product in products:
        semantic = semantic_scores.get(_candidate_key(product), 0.0)
        price_score = 1.0 - product.price / max_price
        hybrid = (
            product.similarity_score * BM25_WEIGHT
            + semantic * SEMANTIC_WEIGHT
            + price_score * PRICE_WEIGHT
        )
        store = store_map.get(product.store_id)
        store_name = store.name if store is not None else product.store_name
        scored.append(replace(product, similarity_score=hybrid, store_name=store_name))

    matches = []
    for group in _group_by_product(scored).values():
        group.sort(key=lambda p: p.price)
        first = group[0]
        best = max([0.0, *(p.similarity_score for p in group)])
        matches.append(
            MatchedProduct(
                product_name=first.product_name,
                brand=first.brand,
                size_value=first.size_value,
                size_unit=first.size_unit,
                similarity_score=_round_half_away(best, 2),
                supermarket_info=_cheapest_per_store(group, store_map),
            )
        )
    matches.sort(key=lambda m: m.similarity_score, reverse=True)
    return ShoppingListItem(search_term=search_term, top_matches=matches[:TOP_N_MATCHES])


def process_shopping_list(request, db):
    """Find the best-ranked products near the user for every item on the list."""
    nearby = find_stores_to_query(Queries(db), request.latitude, request.longitude)
    if not nearby:
        return ShoppingListResponse(
            items=[ShoppingListItem(search_term=term, top_matches=[]) for term in request.items]
        )
    store_ids = [store.id for store in nearby]
    store_map = {store.id: store for store in nearby}
    search = ProductSearch(db)
    return ShoppingListResponse(
        items=[
            _process_single_item(term, search, store_ids, store_map)
            for term in request.items
        ]
    )