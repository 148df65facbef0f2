# pricecheck

Compare grocery prices across supermarkets near you.

`pricecheck` keeps supermarket products, stores and prices in a local SQLite
database. Items listed by different supermarkets under slightly different
names (same brand, compatible size, similar wording) are merged into one
product, so a single search shows what the same item costs at every nearby
store.

It offers:

- a command line for inspecting the database and starting the API server,
- a small JSON HTTP API that takes a shopping list and a location and returns
  the best matches for each item, with prices from every store within 20 km
  (Woolworth, which prices uniformly through a single store, is always
  included),
- a Python library for loading data and running searches yourself.

## Installation

```
pip install pricecheck
```

Python 3.10 or later is required. The only runtime dependency is Flask; the
database is SQLite through Python's built-in `sqlite3` module, with FTS5 used
for full-text search.

## Command line

```
pricecheck query   # print statistics and sample queries from data/supermarket.db
pricecheck serve   # start the REST API on http://127.0.0.1:8080
```

Both commands use `data/supermarket.db`, relative to the current directory.
The file is created with an empty schema if it does not exist, but the `data`
directory must exist; if the database cannot be opened, an error is printed
and the command exits with status 1. Running `pricecheck` without a command,
or with an unknown one, prints usage.

## HTTP API

Start the server with `pricecheck serve`, then:

| Method | Path                  | Purpose                                        |
|--------|-----------------------|------------------------------------------------|
| POST   | `/api/shopping-list`  | Best matches and store prices per list item    |
| POST   | `/api/paginated-list` | Browse all nearby products, 100 per page       |
| GET    | `/api/health`         | Health check                                   |

Shopping list request:

```
curl -X POST http://127.0.0.1:8080/api/shopping-list \
  -H "Content-Type: application/json" \
  -d '{"items": ["milk", "bread"], "latitude": -36.8485, "longitude": 174.7633}'
```

Each item in the response carries its `search_term` and up to five
`top_matches`. A match holds `product_name`, `brand`, `size_value`,
`size_unit`, a `similarity_score` and a `supermarket_info` list of
`supermarket`, `store_name`, `distance_km` and `price`, one entry per store,
cheapest first.

Candidates come from category matches and SQLite FTS5 BM25 search (falling
back to a word-by-word name/brand search). They are ranked by a blend of
keyword relevance (40%), semantic similarity (20%) and price (40%).

Paginated list request (pages are numbered from 0):

```
curl -X POST http://127.0.0.1:8080/api/paginated-list \
  -H "Content-Type: application/json" \
  -d '{"page": 0, "latitude": -36.8485, "longitude": 174.7633}'
```

A malformed request body gets HTTP 400 with `{"error": "..."}`. The
application itself is built by `pricecheck.api.create_app(db)`.

## Library use

```python
from pricecheck.database import Database
from pricecheck.models import CatalogItem, Store, Supermarket
from pricecheck.queries import Queries
from pricecheck.repository import Repository
from pricecheck.shopping_list import ShoppingListRequest, process_shopping_list

with Database.in_memory() as db:
    store = Store(id="store-1", name="Example Store",
                  latitude=-36.85, longitude=174.76)
    item = CatalogItem(
        id="item-1", name="Salted Butter 500g", brand_name="Anchor",
        price=6.99, supermarket=Supermarket.PAK_N_SAVE,
        category_display_name="Chilled > Butter", category_slug="Butter",
        size_value=0.5, size_unit="Kilogram",
    )
    Repository(db).insert_items_for_store(store, Supermarket.PAK_N_SAVE, [item])

    print(Queries(db).get_stats())

    request = ShoppingListRequest.from_dict(
        {"items": ["butter"], "latitude": -36.8485, "longitude": 174.7633}
    )
    print(process_shopping_list(request, db).to_dict())
```

- `pricecheck.database.Database` opens a file (`Database.open(path)`) or an
  in-memory database (`Database.in_memory()`) with the full schema applied,
  and works as a context manager.
- `pricecheck.repository.Repository.insert_all_items` stores stores,
  products, variants and prices in one transaction, printing its progress.
  Products are merged first by exact name, brand and size, then by embedding
  similarity among products of the same brand and compatible size. A store's
  price from the last five days is replaced by today's.
- `pricecheck.queries.Queries` holds read queries (search by name, brand or
  category, price ranges, cheapest stores, statistics); `pricecheck.report.
  run_sample_queries` prints the overview shown by `pricecheck query`.
- `pricecheck.search.ProductSearch` returns each product's latest price per
  store, including BM25 full-text search.
- `pricecheck.semantic` matches products against a search term by embedding
  similarity.

Embeddings come from `pricecheck.embedding.EmbeddingService`. By default it
uses the built-in `HashingEmbedder`, a deterministic word and
character-trigram embedder. Any object with an `embed(texts)` method
returning one vector per text can be plugged in with
`EmbeddingService.set_backend(...)`; `set_backend(None)` restores the default.

## What the package does not do

`pricecheck` does not download prices from supermarket websites or APIs, and
has no command for it. The database must be filled through `Repository`
(or by other means) before `pricecheck query` or `pricecheck serve` shows
anything. Building blocks for such a loader are included:
`pricecheck.errors` (fetch errors), `pricecheck.console_log.Logger`
(progress output) and `pricecheck.file_logs`, which writes
`data/parse_warnings.log` and `data/empty_brand.log`, each entry once per run.

## Running the tests

```
pip install "pricecheck[test]"
pytest
```