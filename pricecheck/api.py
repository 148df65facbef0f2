"""HTTP API exposing shopping-list comparison, catalogue pages and a health check."""

import threading

from flask import Flask, jsonify, request

from .paginated_list import PaginatedItemRequest, get_list_for_page
from .shopping_list import ShoppingListRequest, process_shopping_list

SERVICE_NAME = "SuperMarketChecker API"


def _bad_request(message):
    return jsonify({"error": message}), 400


def create_app(db):
    """Build the application serving every route under ``/api`` from ``db``."""
    app = Flask(__name__)
    db_lock = threading.Lock()

    @app.post("/api/shopping-list")
    def shopping_list():
        """Top matches per item across nearby stores.

        Physical-store chains are limited to stores within 20 km; single-store
        chains are always included because they price uniformly.
        """
        payload = request.get_json(silent=True)
        try:
            parsed = ShoppingListRequest.from_dict(payload)
        except ValueError as exc:
            return _bad_request(str(exc))
        with db_lock:
            response = process_shopping_list(parsed, db)
        return jsonify(response.to_dict())

    @app.post("/api/paginated-list")
    def paginated_list():
        """One page of the nearby catalogue with prices per store."""
        payload = request.get_json(silent=True)
        try:
            parsed = PaginatedItemRequest.from_dict(payload)
        except ValueError as exc:
            return _bad_request(str(exc))
        with db_lock:
            response = get_list_for_page(parsed, db)
        return jsonify(response.to_dict())

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok", "service": SERVICE_NAME})

    return app