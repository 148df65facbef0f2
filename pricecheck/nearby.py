"""Choosing which stores are close enough to a user to be searched."""

import math

from .models import Supermarket
from .responses import NearbyStore

MAX_DISTANCE_KM = 20.0
EARTH_RADIUS_KM = 6371.0


def haversine_distance_km(lat1, lon1, lat2, lon2):
    """Great-circle distance in kilometres between two latitude/longitude points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    )
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_KM * c


def find_stores_to_query(queries, user_lat, user_lon):
    """Stores within range of the user, plus every store of single-store chains.

    Single-store chains price uniformly everywhere, so their store is always
    included with a distance of 0.0.
    """
    stores = []
    for store in queries.get_all_stores():
        supermarket = Supermarket.from_id(store.supermarket_id)
        if supermarket is not None and supermarket.has_single_store():
            stores.append(NearbyStore(id=store.id, name=store.name, distance_km=0.0))
            continue
        distance = haversine_distance_km(
            user_lat, user_lon, store.latitude, store.longitude
        )
        if distance <= MAX_DISTANCE_KM:
            stores.append(
                NearbyStore(id=store.id, name=store.name, distance_km=distance)
            )
    return stores