"""Writing fetched catalogue data into the database with product deduplication."""

import math
import sqlite3
import sys
from dataclasses import dataclass

from .embedding import (
    EmbeddingError,
    bytes_to_f32_vec,
    cosine_similarity,
    f32_vec_to_bytes,
    generate_embeddings_batch,
)
from .models import CatalogItem, Store, Supermarket

SIMILARITY_THRESHOLD = 0.85
EMBEDDING_BATCH_SIZE = 1000


def normalize_brand(brand):
    """Lowercase and keep only letters and digits: "Whittaker's" -> "whittakers"."""
    return "".join(ch for ch in brand.lower() if ch.isalnum())


def sizes_compatible(a_value, a_unit, b_value, b_unit):
    """Same unit and values within 1% of each other (two zeros also match)."""
    if a_unit != b_unit:
        return False
    if a_value == 0.0 and b_value == 0.0:
        return True
    if a_value == 0.0 or b_value == 0.0:
        return False
    return 0.99 <= a_value / b_value <= 1.01


def _round_half_away(value):
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _warn(message):
    print(message, file=sys.stderr)


@dataclass(frozen=True)
class ProductKey:
    """Identity used to group identical items before touching the database."""

    name: str
    brand: str
    size_value_cents: int
    size_unit: str

    @classmethod
    def from_item(cls, item):
        return cls(
            name=item.name.lower(),
            brand=normalize_brand(item.brand_name),
            size_value_cents=_round_half_away(item.size_value * 100.0),
            size_unit=item.size_unit,
        )

    def to_embedding_text(self):
        return f"{self.brand} {self.name}" if self.brand else self.name


@dataclass(frozen=True)
class ItemWithStore:
    """A catalogue item together with the store that sells it."""

    item: CatalogItem
    store: Store
    supermarket: Supermarket


@dataclass
class DeduplicationStats:
    unique_products: int
    variants: int
    prices: int
    deduplication_ratio: float

    def __str__(self):
        return (
            f"Unique products: {self.unique_products}, Variants: {self.variants}, "
            f"Prices: {self.prices}, Ratio: {self.deduplication_ratio:.2f}x"
        )


class Repository:
    """Inserts stores, products, variants and prices into a ``Database``."""

    def __init__(self, db):
        self.db = db

    @property
    def _conn(self):
        return self.db.conn

    def insert_store(self, store, supermarket):
        """Insert a store unless one with the same id already exists."""
        self._conn.execute(
            "INSERT OR IGNORE INTO stores (id, supermarket_id, name, address, latitude, longitude)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (store.id, supermarket.id, store.name, store.address,
             store.latitude, store.longitude),
        )

    def _insert_category_cached(self, display_name, slug, supermarket, cache):
        key = (display_name, supermarket)
        if key in cache:
            return cache[key]
        self._conn.execute(
            "INSERT OR IGNORE INTO categories (display_name, slug, supermarket_id)"
            " VALUES (?, ?, ?)",
            (display_name, slug, supermarket.id),
        )
        row = self._conn.execute(
            "SELECT id FROM categories WHERE display_name = ? AND supermarket_id = ?",
            (display_name, supermarket.id),
        ).fetchone()
        if row is None:
            raise sqlite3.DatabaseError(f"category '{display_name}' was not stored")
        cache[key] = row[0]
        return row[0]

    def insert_variant(self, item, product_id, category_id):
        """Insert or replace a supermarket's listing of a product; return its id."""
        supermarket_name = item.supermarket.display_name
        self._conn.execute(
            "INSERT OR REPLACE INTO product_variants"
            " (product_id, external_id, original_name, image_url, category_id, supermarket)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (product_id, item.id, item.name, item.image_url, category_id, supermarket_name),
        )
        row = self._conn.execute(
            "SELECT id FROM product_variants WHERE external_id = ? AND supermarket = ?",
            (item.id, supermarket_name),
        ).fetchone()
        if row is None:
            raise sqlite3.DatabaseError(f"variant '{item.id}' was not stored")
        return row[0]

    def insert_price(self, variant_id, store_id, price):
        """Record today's price, replacing any price from the last five days."""
        self._conn.execute(
            "DELETE FROM prices WHERE variant_id = ? AND store_id = ?"
            " AND fetched_at >= DATE('now', '-5 days')",
            (variant_id, store_id),
        )
        self._conn.execute(
            "INSERT INTO prices (variant_id, store_id, price, fetched_at)"
            " VALUES (?, ?, ?, DATE('now'))",
            (variant_id, store_id, price),
        )

    def _find_exact_match(self, name, brand, size_value, size_unit):
        row = self._conn.execute(
            "SELECT id FROM products WHERE name = ? AND brand = ?"
            " AND size_value = ? AND size_unit = ?",
            (name, brand, size_value, size_unit),
        ).fetchone()
        return None if row is None else row[0]

    def _candidates_by_brand(self, brand):
        rows = self._conn.execute(
            "SELECT id, size_value, size_unit, embedding FROM products WHERE brand = ?",
            (brand,),
        ).fetchall()
        return [
            (row[0], float(row[1]), str(row[2]), bytes_to_f32_vec(row[3]))
            for row in rows
        ]

    def _create_product(self, item, embedding):
        cursor = self._conn.execute(
            "INSERT INTO products (name, brand, size_value, size_unit, embedding)"
            " VALUES (?, ?, ?, ?, ?)",
            (item.name, normalize_brand(item.brand_name), item.size_value,
             item.size_unit, f32_vec_to_bytes(embedding)),
        )
        product_id = cursor.lastrowid
        self._conn.execute(
            "INSERT OR REPLACE INTO products_fts (rowid, name, brand) VALUES (?, ?, ?)",
            (product_id, item.name, item.brand_name),
        )
        return product_id

    def _semantic_match(self, item, embedding):
        try:
            candidates = self._candidates_by_brand(normalize_brand(item.brand_name))
        except sqlite3.Error:
            return None
        for cand_id, cand_value, cand_unit, cand_embedding in candidates:
            if not sizes_compatible(item.size_value, item.size_unit, cand_value, cand_unit):
                continue
            if cosine_similarity(embedding, cand_embedding) >= SIMILARITY_THRESHOLD:
                return cand_id
        return None

    def insert_all_items(self, items_with_stores):
        """Insert stores, deduplicated products, variants and prices in one transaction."""
        items_with_stores = list(items_with_stores)
        if not items_with_stores:
            return
        self._conn.execute("BEGIN TRANSACTION")
        try:
            self._insert_all(items_with_stores)
        except BaseException:
            if self._conn.in_transaction:
                self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    def _insert_all(self, items_with_stores):
        print("Phase 1: Inserting stores...")
        seen_stores = set()
        for iws in items_with_stores:
            store_key = (iws.store.id, iws.supermarket)
            if store_key in seen_stores:
                continue
            try:
                self.insert_store(iws.store, iws.supermarket)
            except sqlite3.Error as exc:
                _warn(f"Warning: Failed to insert store '{iws.store.name}': {exc}")
            seen_stores.add(store_key)
        print(f"  Inserted {len(seen_stores)} stores")

        print("Phase 2: In-memory deduplication...")
        groups = {}
        for iws in items_with_stores:
            groups.setdefault(ProductKey.from_item(iws.item), []).append(iws)
        print(f"  {len(items_with_stores)} items -> {len(groups)} unique products")

        print("Phase 3: Finding exact matches...")
        product_ids = {}
        needs_embedding = []
        for key, group in groups.items():
            item = group[0].item
            try:
                found = self._find_exact_match(
                    item.name, normalize_brand(item.brand_name),
                    item.size_value, item.size_unit,
                )
            except sqlite3.Error as exc:
                _warn(f"Warning: Exact match query failed: {exc}")
                found = None
            if found is None:
                needs_embedding.append((key, item))
            else:
                product_ids[key] = found
        exact = len(product_ids)
        print(f"  {exact} exact matches, {len(needs_embedding)} need embeddings")

        if needs_embedding:
            self._match_or_create(needs_embedding, product_ids)

        print("Phase 5: Inserting variants and prices...")
        category_cache = {}
        variants_inserted = prices_inserted = 0
        for iws in items_with_stores:
            product_id = product_ids.get(ProductKey.from_item(iws.item))
            if product_id is None:
                continue
            try:
                category_id = self._insert_category_cached(
                    iws.item.category_display_name, iws.item.category_slug,
                    iws.supermarket, category_cache,
                )
            except sqlite3.Error as exc:
                _warn(f"Warning: Failed to insert category: {exc}")
                continue
            try:
                variant_id = self.insert_variant(iws.item, product_id, category_id)
            except sqlite3.Error as exc:
                _warn(f"Warning: Failed to insert variant '{iws.item.name}': {exc}")
                continue
            variants_inserted += 1
            try:
                self.insert_price(variant_id, iws.store.id, iws.item.price)
            except sqlite3.Error as exc:
                _warn(f"Warning: Failed to insert price: {exc}")
            else:
                prices_inserted += 1
        print(
            f"  {variants_inserted} variants, {prices_inserted} prices "
            f"(cached {len(category_cache)} categories)"
        )

    def _match_or_create(self, needs_embedding, product_ids):
        print("Phase 4: Generating embeddings in batches...")
        semantic_matches = new_products = 0
        for start in range(0, len(needs_embedding), EMBEDDING_BATCH_SIZE):
            batch = needs_embedding[start:start + EMBEDDING_BATCH_SIZE]
            texts = [key.to_embedding_text() for key, _ in batch]
            batch_number = start // EMBEDDING_BATCH_SIZE + 1
            print(f"  Batch {batch_number}: generating {len(texts)} embeddings... ", end="")
            try:
                embeddings = generate_embeddings_batch(texts)
            except EmbeddingError as exc:
                _warn(f"Failed: {exc}")
                continue
            print("done, matching...")
            for (key, item), embedding in zip(batch, embeddings):
                matched = self._semantic_match(item, embedding)
                if matched is not None:
                    product_ids[key] = matched
                    semantic_matches += 1
                    continue
                try:
                    product_ids[key] = self._create_product(item, embedding)
                except sqlite3.Error as exc:
                    _warn(f"Warning: Failed to create product '{item.name}': {exc}")
                else:
                    new_products += 1
        print(f"  {semantic_matches} semantic matches, {new_products} new products")

    def insert_items_for_store(self, store, supermarket, items):
        """Insert every item as sold at one store."""
        self.insert_all_items(
            ItemWithStore(item=item, store=store, supermarket=supermarket)
            for item in items
        )

    def get_deduplication_stats(self):
        """Counts of products, variants and prices, and variants per product."""
        def count(table):
            return self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

        products = count("products")
        variants = count("product_variants")
        prices = count("prices")
        ratio = variants / products if variants > 0 else 1.0
        return DeduplicationStats(products, variants, prices, ratio)