"""Response shapes returned by the shopping-list and paginated-list services."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class SupermarketInfo:
    """Price of a product at one store, with the store's distance from the user."""

    supermarket: str
    store_name: str
    distance_km: float
    price: float

    def to_dict(self):
        return {
            "supermarket": self.supermarket,
            "store_name": self.store_name,
            "distance_km": self.distance_km,
            "price": self.price,
        }


@dataclass
class MatchedProduct:
    """A product matching a search term, with its prices at several stores."""

    product_name: str
    brand: str
    size_value: float
    size_unit: str
    similarity_score: float
    supermarket_info: List[SupermarketInfo] = field(default_factory=list)

    def to_dict(self):
        return {
            "product_name": self.product_name,
            "brand": self.brand,
            "size_value": self.size_value,
            "size_unit": self.size_unit,
            "similarity_score": self.similarity_score,
            "supermarket_info": [info.to_dict() for info in self.supermarket_info],
        }


@dataclass
class PaginatedProduct:
    """A product on a catalogue page, with its prices at several stores."""

    product_name: str
    brand: str
    size_value: float
    size_unit: str
    supermarket_info: List[SupermarketInfo] = field(default_factory=list)

    def to_dict(self):
        return {
            "product_name": self.product_name,
            "brand": self.brand,
            "size_value": self.size_value,
            "size_unit": self.size_unit,
            "supermarket_info": [info.to_dict() for info in self.supermarket_info],
        }


@dataclass
class ShoppingListItem:
    """One entry of a shopping list and the products that matched it."""

    search_term: str
    top_matches: List[MatchedProduct] = field(default_factory=list)

    def to_dict(self):
        return {
            "search_term": self.search_term,
            "top_matches": [match.to_dict() for match in self.top_matches],
        }


@dataclass(frozen=True)
class NearbyStore:
    """A store to query for products, with its distance from the user."""

    id: str
    name: str
    distance_km: float