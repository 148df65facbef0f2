import pytest

from pricecheck.database import Database
from pricecheck.queries import (
    DatabaseStats,
    PriceRangeResult,
    Queries,
    StoreInfo,
)


def _add_product(conn, name, brand="Anchor", size_value=1.0, size_unit="Liter"):
    cur = conn.execute(
        "INSERT INTO products (name, brand, size_value, size_unit, embedding) "
        "VALUES (?, ?, ?, ?, ?)",
        (name, brand, size_value, size_unit, b""),
    )
    return cur.lastrowid


def _add_category(conn, display_name, slug, supermarket_id):
    cur = conn.execute(
        "INSERT INTO categories (display_name, slug, supermarket_id) VALUES (?, ?, ?)",
        (display_name, slug, supermarket_id),
    )
    return cur.lastrowid


def _add_variant(conn, product_id, external_id, supermarket, category_id=None):
    cur = conn.execute(
        "INSERT INTO product_variants "
        "(product_id, external_id, original_name, category_id, supermarket) "
        "VALUES (?, ?, ?, ?, ?)",
        (product_id, external_id, external_id, category_id, supermarket),
    )
    return cur.lastrowid


def _add_store(conn, store_id, supermarket_id, name, address="1 Main St", lat=None, lon=None):
    conn.execute(
        "INSERT INTO stores (id, supermarket_id, name, address, latitude, longitude) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (store_id, supermarket_id, name, address, lat, lon),
    )


def _add_price(conn, variant_id, store_id, price, fetched_at="2024-01-01"):
    conn.execute(
        "INSERT INTO prices (variant_id, store_id, price, fetched_at) VALUES (?, ?, ?, ?)",
        (variant_id, store_id, price, fetched_at),
    )


@pytest.fixture
def db():
    database = Database.in_memory()
    conn = database.conn
    _add_store(conn, "s1", 1, "New World Central", lat=-36.85, lon=174.76)
    _add_store(conn, "s2", 2, "Pak Albany", lat=-36.72, lon=174.70)
    _add_store(conn, "s3", 3, "Woolworths Online")
    dairy = _add_category(conn, "Fridge > Milk", "Fresh Milk", 1)
    choc = _add_category(conn, "Pantry > Chocolate", "Chocolate", 2)

    milk = _add_product(conn, "Anchor Milk 2L")
    v_milk_nw = _add_variant(conn, milk, "m1", "NewWorld", dairy)
    v_milk_pk = _add_variant(conn, milk, "m2", "PakNSave")
    _add_price(conn, v_milk_nw, "s1", 4.5, "2024-01-01")
    _add_price(conn, v_milk_nw, "s1", 4.2, "2024-01-05")
    _add_price(conn, v_milk_pk, "s2", 3.9)

    bar = _add_product(conn, "Dark Chocolate Bar", brand="whittakers", size_value=0.25, size_unit="Kilogram")
    v_bar = _add_variant(conn, bar, "c1", "PakNSave", choc)
    _add_price(conn, v_bar, "s2", 5.5)
    _add_price(conn, v_bar, "s3", 6.0)

    nobrand = _add_product(conn, "Skim Milk 1L", brand=None)
    _add_variant(conn, nobrand, "m3", "Woolworth")

    yield database
    database.close()


def test_search_products_is_case_insensitive_and_sorted(db):
    results = Queries(db).search_products("milk")
    assert [r.name for r in results] == ["Anchor Milk 2L", "Skim Milk 1L"]


def test_search_products_defaults_missing_brand_and_category(db):
    results = Queries(db).search_products("Skim")
    assert len(results) == 1
    assert results[0].brand == ""
    assert results[0].category == ""
    assert results[0].supermarket == "Woolworth"


def test_search_products_skips_rows_missing_size_unit(db):
    pid = _add_product(db.conn, "Oat Milk", size_unit=None)
    _add_variant(db.conn, pid, "o1", "NewWorld")
    names = [r.name for r in Queries(db).search_products("Oat")]
    assert names == []


def test_get_price_range_groups_by_supermarket(db):
    ranges = Queries(db).get_price_range("Anchor Milk")
    assert ranges[0] == PriceRangeResult("Anchor Milk 2L", "PakNSave", 3.9, 3.9, 1)
    assert ranges[1].supermarket == "NewWorld"
    assert ranges[1].min_price == 4.2
    assert ranges[1].max_price == 4.5
    assert ranges[1].store_count == 1


def test_find_cheapest_stores_orders_and_limits(db):
    prices = Queries(db).find_cheapest_stores("", 3)
    assert len(prices) == 3
    assert [p.price for p in prices] == sorted(p.price for p in prices)
    assert prices[0].store_name == "Pak Albany"
    assert prices[0].store_address == "1 Main St"


def test_get_prices_for_product_uses_latest_price(db):
    milk_id = db.conn.execute("SELECT id FROM products WHERE name = 'Anchor Milk 2L'").fetchone()[0]
    prices = Queries(db).get_prices_for_product(milk_id)
    assert [(p.store_id, p.price) for p in prices] == [("s2", 3.9), ("s1", 4.2)]
    assert prices[1].fetched_at == "2024-01-05"
    assert prices[1].store_latitude == -36.85


def test_get_stats_counts_tables(db):
    assert Queries(db).get_stats() == DatabaseStats(
        products=3, variants=4, prices=5, stores=3, categories=2
    )


def test_get_stats_empty_database():
    with Database.in_memory() as empty:
        assert Queries(empty).get_stats() == DatabaseStats(0, 0, 0, 0, 0)


def test_products_per_supermarket(db):
    counts = dict(Queries(db).get_products_per_supermarket())
    assert counts == {"PakNSave": 2, "NewWorld": 1, "Woolworth": 1}
    assert Queries(db).get_products_per_supermarket()[0] == ("PakNSave", 2)


def test_get_products_by_category(db):
    results = Queries(db).get_products_by_category("Chocolate", 10)
    assert [(r.name, r.category) for r in results] == [
        ("Dark Chocolate Bar", "Pantry > Chocolate")
    ]


def test_get_products_by_category_respects_limit(db):
    assert Queries(db).get_products_by_category(">", 1)[0].name == "Anchor Milk 2L"
    assert len(Queries(db).get_products_by_category(">", 1)) == 1


def test_get_products_by_brand(db):
    results = Queries(db).get_products_by_brand("Whittaker")
    assert len(results) == 1
    assert results[0].min_price == 5.5
    assert results[0].max_price == 6.0
    assert results[0].brand == "whittakers"


def test_get_all_stores_defaults_coordinates(db):
    stores = {s.id: s for s in Queries(db).get_all_stores()}
    assert set(stores) == {"s1", "s2", "s3"}
    assert stores["s3"] == StoreInfo("s3", "Woolworths Online", 3, "Woolworth", 0.0, 0.0)
    assert stores["s1"].supermarket_name == "NewWorld"


def test_get_stores_by_supermarket(db):
    stores = Queries(db).get_stores_by_supermarket(2)
    assert [(s.id, s.supermarket_name) for s in stores] == [("s2", "PakNSave")]
    assert Queries(db).get_stores_by_supermarket(99) == []