"""Query-time semantic matching of products against a search term."""

from dataclasses import dataclass, replace

from .embedding import Embeddable, EmbeddingError, EmbeddingService, cosine_similarity


@dataclass
class Product(Embeddable):
    """A priced product at a store, with its latest match score."""

    product_name: str
    brand: str
    size_value: float
    size_unit: str
    price: float
    supermarket: str
    store_name: str
    store_id: str
    store_latitude: float
    store_longitude: float
    similarity_score: float = 0.0

    def to_embedding_text(self):
        if not self.brand:
            return self.product_name
        return f"{self.brand} {self.product_name}"

    def to_dict(self):
        return {
            "product_name": self.product_name,
            "brand": self.brand,
            "size_value": self.size_value,
            "size_unit": self.size_unit,
            "price": self.price,
            "supermarket": self.supermarket,
            "store_name": self.store_name,
            "store_id": self.store_id,
            "store_latitude": self.store_latitude,
            "store_longitude": self.store_longitude,
            "similarity_score": self.similarity_score,
        }


class ProductSearcher:
    """Semantic search over a fixed list of products."""

    def __init__(self, products):
        self.products = list(products)

    def find_matches(self, search_term, threshold):
        return find_matching_products_semantic(search_term, self.products, threshold)


def find_matching_products_semantic(search_term, products, threshold):
    """Copies of the products scoring at least ``threshold``, best match first."""
    products = list(products)
    if not products:
        return []
    texts = [search_term, *(product.to_embedding_text() for product in products)]
    try:
        query, *embeddings = EmbeddingService.generate_batch(texts)
    except EmbeddingError:
        return []
    matches = []
    for product, embedding in zip(products, embeddings):
        similarity = cosine_similarity(query, embedding)
        if similarity >= threshold:
            matches.append(replace(product, similarity_score=similarity))
    matches.sort(key=lambda product: product.similarity_score, reverse=True)
    return matches


def find_best_matches_semantic(search_term, products, threshold, top_n):
    """The ``top_n`` cheapest products that match semantically."""
    matches = find_matching_products_semantic(search_term, products, threshold)
    matches.sort(key=lambda product: product.price)
    return matches[:top_n]