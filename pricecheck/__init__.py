"""Supermarket price comparison: SQLite price database, product deduplication and matching, and a JSON API."""

__version__ = "0.1.0"