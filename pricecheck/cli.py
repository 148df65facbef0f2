"""Command-line entry point: sample queries or the HTTP API server."""

import sqlite3
import sys

from .api import create_app
from .database import Database
from .report import run_sample_queries

DEFAULT_DB_PATH = "data/supermarket.db"
HOST = "127.0.0.1"
PORT = 8080


def print_usage():
    """Print the available commands."""
    print("SuperMarket Price Checker")
    print("=========================")
    print()
    print("Usage:")
    print("  pricecheck query   # Run sample database queries")
    print("  pricecheck serve   # Start the REST API server")
    print()
    print(f"Database: {DEFAULT_DB_PATH}")


def run_server(db_path=DEFAULT_DB_PATH):
    """Serve the API on 127.0.0.1:8080 until interrupted."""
    with Database.open(db_path) as db:
        app = create_app(db)
        print("Starting SuperMarket Checker API server...")
        print(f"Listening on http://{HOST}:{PORT}")
        print()
        print("Available endpoints:")
        print("  POST /api/shopping-list  - Compare prices for a shopping list")
        print("  POST /api/paginated-list - Browse nearby products page by page")
        print("  GET  /api/health         - Health check")
        print()
        print("Example request:")
        print(f"  curl -X POST http://{HOST}:{PORT}/api/shopping-list \\")
        print('    -H "Content-Type: application/json" \\')
        print(
            "    -d '{\"items\": [\"milk\", \"bread\"], "
            "\"latitude\": -36.8485, \"longitude\": 174.7633}'"
        )
        app.run(host=HOST, port=PORT)


def _open_failed(exc):
    print(
        f"Failed to open database {DEFAULT_DB_PATH}: {exc}. "
        "Populate it with fetched prices first.",
        file=sys.stderr,
    )
    return 1


def main(argv=None):
    """Run the command named in ``argv`` (defaults to the process arguments)."""
    args = sys.argv[1:] if argv is None else list(argv)
    command = args[0] if args else None

    if command == "query":
        try:
            db = Database.open(DEFAULT_DB_PATH)
        except sqlite3.Error as exc:
            return _open_failed(exc)
        with db:
            run_sample_queries(db)
        return 0
    if command == "serve":
        try:
            run_server(DEFAULT_DB_PATH)
        except sqlite3.Error as exc:
            return _open_failed(exc)
        return 0
    print_usage()
    return 0


if __name__ == "__main__":
    sys.exit(main())