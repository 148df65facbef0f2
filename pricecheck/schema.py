"""Database schema: tables, indexes and the full-text index for products."""

import sqlite3

_SUPERMARKETS = ((1, "NewWorld"), (2, "PakNSave"), (3, "Woolworth"))

# Table name -> column definitions, in creation order.
_TABLES = {
    "supermarkets": (
        "id INTEGER PRIMARY KEY",
        "name TEXT NOT NULL UNIQUE",
    ),
    "stores": (
        "id TEXT PRIMARY KEY",
        "supermarket_id INTEGER NOT NULL REFERENCES supermarkets(id)",
        "name TEXT NOT NULL",
        "address TEXT",
        "latitude REAL",
        "longitude REAL",
    ),
    "categories": (
        "id INTEGER PRIMARY KEY AUTOINCREMENT",
        "display_name TEXT NOT NULL",
        "slug TEXT NOT NULL",
        "supermarket_id INTEGER NOT NULL REFERENCES supermarkets(id)",
        "UNIQUE(display_name, supermarket_id)",
    ),
    "products": (
        "id INTEGER PRIMARY KEY AUTOINCREMENT",
        "name TEXT NOT NULL",
        "brand TEXT",
        "size_value REAL",
        "size_unit TEXT",
        "embedding BLOB NOT NULL",
    ),
    "product_variants": (
        "id INTEGER PRIMARY KEY AUTOINCREMENT",
        "product_id INTEGER NOT NULL REFERENCES products(id)",
        "external_id TEXT NOT NULL",
        "original_name TEXT NOT NULL",
        "image_url TEXT",
        "category_id INTEGER REFERENCES categories(id)",
        "supermarket TEXT NOT NULL",
        "UNIQUE(external_id, supermarket)",
    ),
    "prices": (
        "id INTEGER PRIMARY KEY AUTOINCREMENT",
        "variant_id INTEGER NOT NULL REFERENCES product_variants(id)",
        "store_id TEXT NOT NULL REFERENCES stores(id)",
        "price REAL NOT NULL",
        "fetched_at TEXT DEFAULT (DATE('now'))",
        "UNIQUE(variant_id, store_id, fetched_at)",
    ),
    "metadata": (
        "key TEXT PRIMARY KEY",
        "value TEXT NOT NULL",
    ),
}

# (index name, table, indexed columns)
_INDEXES = (
    ("idx_products_exact", "products", ("name", "brand", "size_value", "size_unit")),
    ("idx_products_brand", "products", ("brand",)),
    ("idx_variants_product", "product_variants", ("product_id",)),
    ("idx_variants_external", "product_variants", ("external_id", "supermarket")),
    ("idx_prices_variant", "prices", ("variant_id",)),
    ("idx_prices_store", "prices", ("store_id",)),
    ("idx_prices_fetched", "prices", ("fetched_at",)),
)

_FTS_OPTIONS = ("name", "brand", "content=''", "contentless_delete=1")
# Older SQLite builds lack contentless_delete; a regular FTS5 table
# supports the same inserts, replacements and MATCH queries.
_FTS_FALLBACK_OPTIONS = ("name", "brand")


def _table_sql(name, columns):
    return f"CREATE TABLE IF NOT EXISTS {name} ({', '.join(columns)})"


def _index_sql(name, table, columns):
    return f"CREATE INDEX IF NOT EXISTS {name} ON {table}({', '.join(columns)})"


def _fts_sql(options):
    return (
        "CREATE VIRTUAL TABLE IF NOT EXISTS products_fts "
        f"USING fts5({', '.join(options)})"
    )


def initialize(conn):
    """Create all tables and indexes if missing. Safe to call repeatedly."""
    for name, columns in _TABLES.items():
        conn.execute(_table_sql(name, columns))
    conn.executemany(
        "INSERT OR IGNORE INTO supermarkets (id, name) VALUES (?, ?)", _SUPERMARKETS
    )
    for name, table, columns in _INDEXES:
        conn.execute(_index_sql(name, table, columns))
    try:
        conn.execute(_fts_sql(_FTS_OPTIONS))
    except sqlite3.OperationalError:
        conn.execute(_fts_sql(_FTS_FALLBACK_OPTIONS))
    if conn.in_transaction:
        conn.commit()