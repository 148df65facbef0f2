"""Supermarkets, store locations and catalogue items as fetched from the APIs."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Supermarket(Enum):
    """A supermarket chain; the value is its id in the database."""

    NEW_WORLD = 1
    PAK_N_SAVE = 2
    WOOLWORTH = 3

    @property
    def id(self):
        return self.value

    @property
    def display_name(self):
        """The name stored in the ``supermarkets`` table and on variants."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_id(cls, supermarket_id):
        """The supermarket with this id, or ``None`` if there is none."""
        try:
            return cls(int(supermarket_id))
        except (ValueError, TypeError):
            return None

    def has_single_store(self):
        """True for chains with one virtual store and uniform prices everywhere."""
        return self is Supermarket.WOOLWORTH


_DISPLAY_NAMES = {
    Supermarket.NEW_WORLD: "NewWorld",
    Supermarket.PAK_N_SAVE: "PakNSave",
    Supermarket.WOOLWORTH: "Woolworth",
}


@dataclass(frozen=True)
class Store:
    """A physical (or virtual) store location."""

    id: str
    name: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class CatalogItem:
    """One product as listed by a supermarket, with its size already normalised."""

    id: str
    name: str
    brand_name: str
    price: float
    supermarket: Supermarket
    category_display_name: str
    category_slug: str
    size_value: float = 0.0
    size_unit: str = ""
    image_url: Optional[str] = None