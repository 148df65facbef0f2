import pytest

from pricecheck.database import Database
from pricecheck.paginated_list import (
    PaginatedItemRequest,
    PaginatedItemResponse,
    get_list_for_page,
)

USER = {"latitude": -36.8485, "longitude": 174.7633}


def _seed(conn):
    conn.executemany(
        "INSERT INTO stores (id, supermarket_id, name, address, latitude, longitude)"
        " VALUES (?, ?, ?, ?, ?, ?)",
        [
            ("nw-near", 1, "New World Near", "1 Queen St", -36.85, 174.76),
            ("ps-far", 2, "Pak Far", "1 Lambton Quay", -41.28, 174.77),
            ("ww-online", 3, "Woolworths Online", None, None, None),
        ],
    )
    conn.executemany(
        "INSERT INTO products (id, name, brand, size_value, size_unit, embedding)"
        " VALUES (?, ?, ?, ?, ?, ?)",
        [
            (1, "Anchor Blue Milk", "anchor", 2.0, "Liter", b""),
            (2, "Vogels Bread", "vogels", 0.7, "Kilogram", b""),
        ],
    )
    conn.executemany(
        "INSERT INTO product_variants (id, product_id, external_id, original_name,"
        " supermarket) VALUES (?, ?, ?, ?, ?)",
        [
            (1, 1, "ext1", "Anchor Blue Milk", "NewWorld"),
            (2, 1, "ext2", "Anchor Blue Milk", "Woolworth"),
            (3, 2, "ext3", "Vogels Bread", "NewWorld"),
            (4, 1, "ext4", "Anchor Blue Milk", "PakNSave"),
        ],
    )
    conn.executemany(
        "INSERT INTO prices (variant_id, store_id, price) VALUES (?, ?, ?)",
        [(1, "nw-near", 4.5), (2, "ww-online", 5.0), (3, "nw-near", 3.5), (4, "ps-far", 3.0)],
    )


@pytest.fixture
def db():
    database = Database.in_memory()
    _seed(database.conn)
    yield database
    database.close()


def _request(page):
    return PaginatedItemRequest.from_dict({"page": page, **USER})


def test_request_from_dict():
    request = _request(2)
    assert request.page == 2
    assert request.latitude == USER["latitude"]
    assert request.longitude == USER["longitude"]


@pytest.mark.parametrize(
    "data",
    [
        {"latitude": 1.0, "longitude": 2.0},
        {"page": "1", "latitude": 1.0, "longitude": 2.0},
        {"page": 1.5, "latitude": 1.0, "longitude": 2.0},
        {"page": True, "latitude": 1.0, "longitude": 2.0},
        {"page": 0, "longitude": 2.0},
        "page",
    ],
)
def test_request_rejects_malformed_data(data):
    with pytest.raises(ValueError):
        PaginatedItemRequest.from_dict(data)


def test_first_page_groups_products_with_nearby_prices(db):
    response = get_list_for_page(_request(0), db)
    by_name = {item.product_name: item for item in response.items}
    assert set(by_name) == {"Anchor Blue Milk", "Vogels Bread"}
    milk_prices = [i.price for i in by_name["Anchor Blue Milk"].supermarket_info]
    assert milk_prices == [4.5, 5.0]
    assert [i.price for i in by_name["Vogels Bread"].supermarket_info] == [3.5]


def test_prices_sorted_and_one_per_store(db):
    response = get_list_for_page(_request(0), db)
    for item in response.items:
        prices = [i.price for i in item.supermarket_info]
        assert prices == sorted(prices)
        names = [i.store_name for i in item.supermarket_info]
        assert len(names) == len(set(names))


def test_page_past_end_is_empty(db):
    assert get_list_for_page(_request(1), db).items == []


def test_no_stores_gives_empty_page():
    with Database.in_memory() as empty:
        assert get_list_for_page(_request(0), empty).items == []


def test_response_to_dict(db):
    data = get_list_for_page(_request(0), db).to_dict()
    names = sorted(item["product_name"] for item in data["items"])
    assert names == ["Anchor Blue Milk", "Vogels Bread"]
    assert all("similarity_score" not in item for item in data["items"])
    assert PaginatedItemResponse().to_dict() == {"items": []}