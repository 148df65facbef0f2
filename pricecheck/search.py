"""Product searches that return prices together with the stores offering them."""

import sqlite3
from dataclasses import dataclass

_PRODUCT_COLUMNS = """
    p.name, COALESCE(p.brand, ''), COALESCE(p.size_value, 0.0), COALESCE(p.size_unit, ''),
    pr.price, v.supermarket, st.id, s.id,
    st.name, COALESCE(st.latitude, 0.0), COALESCE(st.longitude, 0.0)
"""

_PRODUCT_JOINS = """
    FROM products p
    JOIN product_variants v ON p.id = v.product_id
    JOIN supermarkets s ON v.supermarket = s.name
    JOIN prices pr ON v.id = pr.variant_id
    JOIN stores st ON pr.store_id = st.id
"""

_LATEST_PRICE = """
    pr.fetched_at = (
        SELECT MAX(pr2.fetched_at)
        FROM prices pr2
        WHERE pr2.variant_id = pr.variant_id AND pr2.store_id = pr.store_id
    )
"""


@dataclass
class ProductWithPriceAndStore:
    """A product's latest price at one store."""

    product_name: str
    brand: str
    size_value: float
    size_unit: str
    price: float
    supermarket: str
    supermarket_id: int
    store_name: str
    store_id: str
    store_latitude: float
    store_longitude: float


@dataclass
class ProductWithBm25Score:
    """A full-text search hit; a more negative score is a better match."""

    product_id: int
    product_name: str
    brand: str
    size_value: float
    size_unit: str
    price: float
    supermarket: str
    store_id: str
    store_name: str
    store_latitude: float
    store_longitude: float
    bm25_score: float


def _complete(rows):
    """Rows without NULLs; incomplete rows are left out."""
    return [row for row in rows if None not in row]


def _placeholders(count):
    return ", ".join("?" * count)


def _product_with_store(row):
    return ProductWithPriceAndStore(
        product_name=str(row[0]),
        brand=str(row[1]),
        size_value=float(row[2]),
        size_unit=str(row[3]),
        price=float(row[4]),
        supermarket=str(row[5]),
        store_id=str(row[6]),
        supermarket_id=int(row[7]),
        store_name=str(row[8]),
        store_latitude=float(row[9]),
        store_longitude=float(row[10]),
    )


def _word_clause(search_term):
    """AND-ed name/brand LIKE conditions, one per word, with their parameters."""
    words = search_term.split()
    clause = " AND ".join("(p.name LIKE ? OR p.brand LIKE ?)" for _ in words)
    params = [pattern for word in words for pattern in (f"%{word}%", f"%{word}%")]
    return words, clause, params


class ProductSearch:
    """Searches returning each matching product's latest price per store."""

    def __init__(self, db):
        self.db = db

    def _products(self, sql, params=()):
        rows = self.db.conn.execute(sql, list(params)).fetchall()
        return [_product_with_store(row) for row in _complete(rows)]

    def _category_ids(self, sql, value):
        rows = self.db.conn.execute(sql, (value,)).fetchall()
        return [int(row[0]) for row in _complete(rows)]

    def find_matching_category_ids(self, search_term):
        """Category ids for a term: exact slug, else "fresh <term>", else slug ending in the term."""
        term = search_term.lower()
        equal = "SELECT DISTINCT id FROM categories WHERE LOWER(slug) = ?"
        exact = self._category_ids(equal, term)
        if exact:
            return exact
        fresh = self._category_ids(equal, f"fresh {term}")
        if fresh:
            return fresh
        return self._category_ids(
            "SELECT DISTINCT id FROM categories WHERE LOWER(slug) LIKE ?", f"% {term}"
        )

    def search_products_in_categories_and_stores(self, category_ids, store_ids):
        """Latest prices of products in the categories at the given stores, cheapest first."""
        category_ids = [int(cid) for cid in category_ids]
        store_ids = list(store_ids)
        if not category_ids or not store_ids:
            return []
        sql = f"""SELECT {_PRODUCT_COLUMNS} {_PRODUCT_JOINS}
                  WHERE v.category_id IN ({_placeholders(len(category_ids))})
                  AND st.id IN ({_placeholders(len(store_ids))})
                  AND {_LATEST_PRICE}
                  ORDER BY pr.price ASC
                  LIMIT 500"""
        return self._products(sql, category_ids + store_ids)

    def get_paginated_products(self, store_ids, page_number, items_per_page):
        """One page of latest prices at the given stores, ordered by product name."""
        store_ids = list(store_ids)
        if not store_ids:
            return []
        sql = f"""SELECT {_PRODUCT_COLUMNS} {_PRODUCT_JOINS}
                  WHERE st.id IN ({_placeholders(len(store_ids))})
                  AND {_LATEST_PRICE}
                  ORDER BY p.name ASC
                  LIMIT ? OFFSET ?"""
        params = store_ids + [int(items_per_page), int(page_number) * int(items_per_page)]
        return self._products(sql, params)

    def search_products_in_stores(self, search_term, store_ids):
        """Products whose name or brand holds every word of the term, at the given stores."""
        store_ids = list(store_ids)
        if not store_ids:
            return []
        words, clause, params = _word_clause(search_term)
        if not words:
            return []
        sql = f"""SELECT {_PRODUCT_COLUMNS} {_PRODUCT_JOINS}
                  WHERE ({clause})
                  AND st.id IN ({_placeholders(len(store_ids))})
                  AND {_LATEST_PRICE}
                  ORDER BY pr.price ASC
                  LIMIT 500"""
        return self._products(sql, params + store_ids)

    def search_products_with_prices_and_stores(self, search_term):
        """Products whose name or brand holds every word of the term, at any store."""
        words, clause, params = _word_clause(search_term)
        if not words:
            return []
        sql = f"""SELECT {_PRODUCT_COLUMNS} {_PRODUCT_JOINS}
                  WHERE ({clause})
                  AND {_LATEST_PRICE}
                  ORDER BY pr.price ASC
                  LIMIT 500"""
        return self._products(sql, params)

    def search_products_bm25(self, search_term, store_ids, limit):
        """Full-text matches ranked by BM25 (best first); any query failure gives []."""
        store_ids = list(store_ids)
        if not store_ids or not search_term.strip():
            return []
        fts_query = " ".join(search_term.split())
        sql = f"""SELECT p.id, p.name, COALESCE(p.brand, ''), COALESCE(p.size_value, 0.0),
                         COALESCE(p.size_unit, ''), pr.price, v.supermarket, st.id,
                         st.name, COALESCE(st.latitude, 0.0), COALESCE(st.longitude, 0.0),
                         bm25(products_fts) AS bm25_score
                  FROM products_fts fts
                  JOIN products p ON fts.rowid = p.id
                  JOIN product_variants v ON p.id = v.product_id
                  JOIN prices pr ON v.id = pr.variant_id
                  JOIN stores st ON pr.store_id = st.id
                  WHERE products_fts MATCH ?
                  AND st.id IN ({_placeholders(len(store_ids))})
                  AND {_LATEST_PRICE}
                  ORDER BY bm25_score
                  LIMIT ?"""
        try:
            rows = self.db.conn.execute(
                sql, [fts_query, *store_ids, int(limit)]
            ).fetchall()
        except sqlite3.Error:
            return []
        return [
            ProductWithBm25Score(
                product_id=int(row[0]),
                product_name=str(row[1]),
                brand=str(row[2]),
                size_value=float(row[3]),
                size_unit=str(row[4]),
                price=float(row[5]),
                supermarket=str(row[6]),
                store_id=str(row[7]),
                store_name=str(row[8]),
                store_latitude=float(row[9]),
                store_longitude=float(row[10]),
                bm25_score=float(row[11]),
            )
            for row in _complete(rows)
        ]