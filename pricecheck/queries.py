"""Read-only queries over the price database: search, price ranges, stores, statistics."""

from dataclasses import dataclass


class _SkipRow(Exception):
    """A row held NULL where a value is required."""


def _required(value):
    if value is None:
        raise _SkipRow
    return value


def _text(value):
    return str(_required(value))


def _real(value):
    return float(_required(value))


def _int(value):
    return int(_required(value))


def _optional_text(value):
    return "" if value is None else str(value)


def _collect(rows, build):
    """Build a result per row, leaving out rows that lack a required value."""
    results = []
    for row in rows:
        try:
            results.append(build(row))
        except _SkipRow:
            continue
    return results


@dataclass
class ProductResult:
    name: str
    supermarket: str
    brand: str
    size_value: float
    size_unit: str
    category: str


@dataclass
class PriceRangeResult:
    product_name: str
    supermarket: str
    min_price: float
    max_price: float
    store_count: int


@dataclass
class StorePrice:
    product_name: str
    supermarket: str
    store_name: str
    store_address: str
    price: float


@dataclass
class DatabaseStats:
    products: int
    variants: int
    prices: int
    stores: int
    categories: int


@dataclass
class ProductWithPrice:
    name: str
    supermarket: str
    brand: str
    min_price: float
    max_price: float


@dataclass
class ProductPriceInfo:
    """Latest price of one product at one store."""

    supermarket: str
    store_name: str
    store_id: str
    price: float
    fetched_at: str
    store_latitude: float
    store_longitude: float


@dataclass
class StoreInfo:
    id: str
    name: str
    supermarket_id: int
    supermarket_name: str
    latitude: float
    longitude: float


def _product_result(row):
    return ProductResult(
        name=_text(row[0]),
        supermarket=_text(row[1]),
        brand=_optional_text(row[2]),
        size_value=_real(row[3]),
        size_unit=_text(row[4]),
        category=_optional_text(row[5]),
    )


def _store_info(row):
    return StoreInfo(
        id=_text(row[0]),
        name=_text(row[1]),
        supermarket_id=_int(row[2]),
        supermarket_name=_text(row[3]),
        latitude=_real(row[4]),
        longitude=_real(row[5]),
    )


class Queries:
    """Common read queries against an open ``Database``."""

    def __init__(self, db):
        self.db = db

    def _fetch(self, sql, params=()):
        return self.db.conn.execute(sql, params).fetchall()

    def _count(self, table):
        try:
            row = self.db.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
        except Exception:
            return 0
        return int(row[0]) if row and row[0] is not None else 0

    def search_products(self, search_term):
        """Products whose name contains ``search_term`` (case-insensitive), at most 50."""
        rows = self._fetch(
            """SELECT p.name, v.supermarket, p.brand, p.size_value, p.size_unit, c.display_name
               FROM products p
               JOIN product_variants v ON p.id = v.product_id
               LEFT JOIN categories c ON v.category_id = c.id
               WHERE p.name LIKE ?1
               GROUP BY p.id
               ORDER BY p.name
               LIMIT 50""",
            (f"%{search_term}%",),
        )
        return _collect(rows, _product_result)

    def get_price_range(self, product_name):
        """Lowest and highest price per product and supermarket, cheapest first."""
        rows = self._fetch(
            """SELECT p.name, v.supermarket, MIN(pr.price), MAX(pr.price),
                      COUNT(DISTINCT pr.store_id)
               FROM products p
               JOIN product_variants v ON p.id = v.product_id
               JOIN prices pr ON v.id = pr.variant_id
               WHERE p.name LIKE ?1
               GROUP BY p.name, v.supermarket
               ORDER BY MIN(pr.price)""",
            (f"%{product_name}%",),
        )
        return _collect(
            rows,
            lambda row: PriceRangeResult(
                product_name=_text(row[0]),
                supermarket=_text(row[1]),
                min_price=_real(row[2]),
                max_price=_real(row[3]),
                store_count=_int(row[4]),
            ),
        )

    def find_cheapest_stores(self, product_name, limit):
        """The ``limit`` cheapest store prices for products matching the name."""
        rows = self._fetch(
            """SELECT p.name, v.supermarket, st.name, st.address, pr.price
               FROM products p
               JOIN product_variants v ON p.id = v.product_id
               JOIN prices pr ON v.id = pr.variant_id
               JOIN stores st ON pr.store_id = st.id
               WHERE p.name LIKE ?1
               ORDER BY pr.price ASC
               LIMIT ?2""",
            (f"%{product_name}%", limit),
        )
        return _collect(
            rows,
            lambda row: StorePrice(
                product_name=_text(row[0]),
                supermarket=_text(row[1]),
                store_name=_text(row[2]),
                store_address=_text(row[3]),
                price=_real(row[4]),
            ),
        )

    def get_prices_for_product(self, product_id):
        """Latest price at every store for one product, cheapest first."""
        rows = self._fetch(
            """SELECT v.supermarket, st.name, st.id, pr.price, pr.fetched_at,
                      COALESCE(st.latitude, 0.0), COALESCE(st.longitude, 0.0)
               FROM product_variants v
               JOIN prices pr ON v.id = pr.variant_id
               JOIN stores st ON pr.store_id = st.id
               WHERE v.product_id = ?1
               AND pr.fetched_at = (
                   SELECT MAX(pr2.fetched_at)
                   FROM prices pr2
                   WHERE pr2.variant_id = pr.variant_id AND pr2.store_id = pr.store_id
               )
               ORDER BY pr.price ASC""",
            (product_id,),
        )
        return _collect(
            rows,
            lambda row: ProductPriceInfo(
                supermarket=_text(row[0]),
                store_name=_text(row[1]),
                store_id=_text(row[2]),
                price=_real(row[3]),
                fetched_at=_text(row[4]),
                store_latitude=_real(row[5]),
                store_longitude=_real(row[6]),
            ),
        )

    def get_stats(self):
        """Row counts of the main tables; a failed count reads as 0."""
        return DatabaseStats(
            products=self._count("products"),
            variants=self._count("product_variants"),
            prices=self._count("prices"),
            stores=self._count("stores"),
            categories=self._count("categories"),
        )

    def get_products_per_supermarket(self):
        """(supermarket, distinct product count) pairs, most variants first."""
        rows = self._fetch(
            """SELECT v.supermarket, COUNT(DISTINCT v.product_id)
               FROM product_variants v
               GROUP BY v.supermarket
               ORDER BY COUNT(*) DESC"""
        )
        return _collect(rows, lambda row: (_text(row[0]), _int(row[1])))

    def get_products_by_category(self, category, limit):
        """Products whose category display name contains ``category``."""
        rows = self._fetch(
            """SELECT p.name, v.supermarket, p.brand, p.size_value, p.size_unit, c.display_name
               FROM products p
               JOIN product_variants v ON p.id = v.product_id
               LEFT JOIN categories c ON v.category_id = c.id
               WHERE c.display_name LIKE ?1
               GROUP BY p.id
               ORDER BY p.name
               LIMIT ?2""",
            (f"%{category}%", limit),
        )
        return _collect(rows, _product_result)

    def get_products_by_brand(self, brand):
        """Products whose brand contains ``brand``, with their price range, at most 50."""
        rows = self._fetch(
            """SELECT p.name, v.supermarket, p.brand, MIN(pr.price), MAX(pr.price)
               FROM products p
               JOIN product_variants v ON p.id = v.product_id
               JOIN prices pr ON v.id = pr.variant_id
               WHERE p.brand LIKE ?1
               GROUP BY p.id
               ORDER BY p.name
               LIMIT 50""",
            (f"%{brand}%",),
        )
        return _collect(
            rows,
            lambda row: ProductWithPrice(
                name=_text(row[0]),
                supermarket=_text(row[1]),
                brand=_text(row[2]),
                min_price=_real(row[3]),
                max_price=_real(row[4]),
            ),
        )

    def get_all_stores(self):
        """Every store with its supermarket; missing coordinates read as 0.0."""
        rows = self._fetch(
            """SELECT st.id, st.name, st.supermarket_id, s.name,
                      COALESCE(st.latitude, 0.0), COALESCE(st.longitude, 0.0)
               FROM stores st
               JOIN supermarkets s ON st.supermarket_id = s.id"""
        )
        return _collect(rows, _store_info)

    def get_stores_by_supermarket(self, supermarket_id):
        """Stores belonging to one supermarket."""
        rows = self._fetch(
            """SELECT st.id, st.name, st.supermarket_id, s.name,
                      COALESCE(st.latitude, 0.0), COALESCE(st.longitude, 0.0)
               FROM stores st
               JOIN supermarkets s ON st.supermarket_id = s.id
               WHERE st.supermarket_id = ?1""",
            (supermarket_id,),
        )
        return _collect(rows, _store_info)