"""Console progress logging for the fetchers."""

import sys
from typing import Protocol


class FetchLogger(Protocol):
    """What a fetcher reports while it runs."""

    def fetching(self, entity): ...

    def fetched(self, count, entity): ...

    def found(self, count, entity): ...

    def fetching_category(self, category): ...

    def fetched_category(self, count, category): ...

    def error(self, message): ...

    def rate_limit_warning(self, status, message): ...

    def retrying(self, attempt, max_attempts): ...


class Logger:
    """Prints progress lines tagged with a prefix such as the supermarket name.

    Per-category progress is not printed, as one line per category would be
    too verbose; it is kept on the logger instead.
    """

    def __init__(self, prefix):
        self.prefix = prefix
        self.current_category = None
        self.category_counts = {}

    def fetching(self, entity):
        print(f"[{self.prefix}] Fetching {entity}...")

    def fetched(self, count, entity):
        print(f"[{self.prefix}] Fetched {count} {entity}")

    def found(self, count, entity):
        print(f"[{self.prefix}] Found {count} {entity}")

    def fetching_category(self, category):
        """Remember which category is being fetched, without printing."""
        self.current_category = category

    def fetched_category(self, count, category):
        """Record how many items a category yielded, without printing."""
        self.category_counts[category] = count
        if self.current_category == category:
            self.current_category = None

    def error(self, message):
        print(f"[{self.prefix}] Error: {message}", file=sys.stderr)

    def rate_limit_warning(self, status, message):
        print(
            f"\n⚠️  [{self.prefix}] RATE LIMITED (HTTP {status}): {message}",
            file=sys.stderr,
        )
        print(
            f"⚠️  [{self.prefix}] The API may be blocking requests. "
            "Consider increasing delays.\n",
            file=sys.stderr,
        )

    def retrying(self, attempt, max_attempts):
        print(f"[{self.prefix}] Retrying... (attempt {attempt}/{max_attempts})")