"""Append-only log files that record each distinct entry once per run."""

import threading
from pathlib import Path

_PARSE_LOG_PATH = Path("data") / "parse_warnings.log"
_EMPTY_BRAND_LOG_PATH = Path("data") / "empty_brand.log"


class DedupFileLog:
    """A log file that skips entries whose key has already been written."""

    def __init__(self, path):
        self.path = Path(path)
        self._seen = set()
        self._lock = threading.Lock()

    def write(self, key, text):
        """Append ``text`` unless ``key`` was seen; return whether it was new."""
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(text)
            except OSError:
                pass
            return True

    def clear(self):
        """Empty the file and forget every key seen so far."""
        with self._lock:
            self._seen.clear()
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text("", encoding="utf-8")
            except OSError:
                pass


_parse_log = DedupFileLog(_PARSE_LOG_PATH)
_empty_brand_log = DedupFileLog(_EMPTY_BRAND_LOG_PATH)


def log_parse_warning(context, value, reason):
    """Record a value that could not be parsed, once per distinct triple."""
    _parse_log.write(
        f"{context}|{value}|{reason}",
        f'[{context}] Failed to parse: "{value}" - {reason}\n',
    )


def clear_parse_log():
    """Start a fresh parse-warnings log."""
    _parse_log.clear()


def log_empty_brand(item_json, item_id, supermarket):
    """Record the raw JSON of an item lacking a brand, once per item."""
    _empty_brand_log.write(f"{supermarket}|{item_id}", f"{item_json}\n---\n")


def clear_empty_brand_log():
    """Start a fresh empty-brand log."""
    _empty_brand_log.clear()