"""Printed overview of the database built from a set of sample queries."""

from .queries import Queries

_RULE = "══════════════════════════════════════════════════════════════════"
_TOP = "┌──────────────────────────────────────────────────────────────────┐"
_BOTTOM = "└──────────────────────────────────────────────────────────────────┘"


def _section(title):
    print(_TOP)
    print(f"│ {title:<65}│")
    print(_BOTTOM)


def run_sample_queries(db):
    """Print statistics and a few example searches for ``db``."""
    queries = Queries(db)

    print("╔══════════════════════════════════════════════════════════════════╗")
    print("║              SUPERMARKET DATABASE - SAMPLE QUERIES               ║")
    print("╚══════════════════════════════════════════════════════════════════╝\n")

    _section("1. DATABASE STATISTICS")
    stats = queries.get_stats()
    print(f"  Products (deduplicated): {stats.products:>10}")
    print(f"  Variants:                {stats.variants:>10}")
    print(f"  Prices:                  {stats.prices:>10}")
    print(f"  Stores:                  {stats.stores:>10}")
    print(f"  Categories:              {stats.categories:>10}")
    if stats.products > 0:
        ratio = stats.variants / stats.products
        print(f"  Dedup ratio:             {ratio:>10.2f}x")
    print()

    _section("2. PRODUCTS PER SUPERMARKET")
    for name, count in queries.get_products_per_supermarket():
        print(f"  {name:<15} {count:>10} variants")
    print()

    _section('3. SEARCH: "Chicken Breast" (first 10)')
    for product in queries.search_products("Chicken Breast")[:10]:
        print(f"  {product.name} | {product.supermarket} | {product.brand}")
    print()

    _section('4. PRICE RANGE: "Anchor Milk" across stores')
    for price in queries.get_price_range("Anchor Milk")[:10]:
        savings = price.max_price - price.min_price
        print(
            f"  {price.product_name} | {price.supermarket} | "
            f"${price.min_price:.2f} - ${price.max_price:.2f} "
            f"({price.store_count} stores) [Save ${savings:.2f}]"
        )
    print()

    _section('5. CHEAPEST STORES: "Salted Butter" (top 10)')
    for store in queries.find_cheapest_stores("Salted Butter", 10):
        print(
            f"  ${store.price:.2f} | {store.product_name} | "
            f"{store.supermarket} | {store.store_name}"
        )
    print()

    _section('6. BRAND SEARCH: "Whittaker" products')
    for product in queries.get_products_by_brand("Whittaker")[:10]:
        print(
            f"  {product.name} | {product.supermarket} | "
            f"${product.min_price:.2f} - ${product.max_price:.2f}"
        )
    print()

    _section('7. CATEGORY: "Chocolate" (first 10)')
    for product in queries.get_products_by_category("Chocolate", 10):
        print(f"  {product.name} | {product.supermarket} | {product.category}")
    print()

    print(_RULE)
    print("  Queries completed! Use Queries struct for custom queries.")
    print(_RULE)