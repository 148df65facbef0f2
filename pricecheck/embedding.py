"""Text embeddings and vector similarity used for product matching."""

import hashlib
import math
import re
import struct
import threading
from abc import ABC, abstractmethod

DEFAULT_DIMENSIONS = 384

_WORD = re.compile(r"[a-z0-9]+")


class Embeddable(ABC):
    """Something that can be turned into text for embedding."""

    @abstractmethod
    def to_embedding_text(self):
        """Return the text used to embed this object."""


class SimilarityScorer(ABC):
    """Scores two embeddings and decides whether they match."""

    threshold = 0.0

    @abstractmethod
    def score(self, a, b):
        """Similarity between two embeddings."""

    def is_match(self, a, b):
        return self.score(a, b) >= self.threshold


class CosineSimilarity(SimilarityScorer):
    """Cosine similarity with a fixed matching threshold."""

    def __init__(self, threshold):
        self.threshold = threshold

    def score(self, a, b):
        return cosine_similarity(a, b)


class EmbeddingError(Exception):
    """Embedding generation failed."""


class HashingEmbedder:
    """Deterministic bag-of-features embedder using words and character trigrams."""

    def __init__(self, dimensions=DEFAULT_DIMENSIONS):
        if dimensions <= 0:
            raise ValueError("dimensions must be positive")
        self.dimensions = dimensions

    @staticmethod
    def _features(text):
        for word in _WORD.findall(text.lower()):
            yield "w:" + word
            padded = f"<{word}>"
            for start in range(len(padded) - 2):
                yield "c:" + padded[start:start + 3]

    def _embed_one(self, text):
        vector = [0.0] * self.dimensions
        for feature in self._features(text):
            digest = hashlib.blake2b(feature.encode("utf-8"), digest_size=8).digest()
            value = int.from_bytes(digest, "little")
            sign = 1.0 if value & 1 else -1.0
            vector[(value >> 1) % self.dimensions] += sign
        norm = math.sqrt(sum(x * x for x in vector))
        if norm == 0.0:
            return vector
        return [x / norm for x in vector]

    def embed(self, texts):
        """Return one unit-length vector per text (all zeros for empty text)."""
        return [self._embed_one(text) for text in texts]


class EmbeddingService:
    """Process-wide access to a lazily created embedding backend."""

    _backend = None
    _lock = threading.Lock()

    @classmethod
    def set_backend(cls, backend):
        """Use ``backend`` (anything with ``embed(texts)``); ``None`` restores the default."""
        with cls._lock:
            cls._backend = backend

    @classmethod
    def _model(cls):
        if cls._backend is None:
            cls._backend = HashingEmbedder()
        return cls._backend

    @classmethod
    def generate(cls, text):
        embeddings = cls.generate_batch([text])
        return embeddings[0] if embeddings else []

    @classmethod
    def generate_batch(cls, texts):
        texts = list(texts)
        if not texts:
            return []
        with cls._lock:
            model = cls._model()
            try:
                return [list(vector) for vector in model.embed(texts)]
            except Exception as exc:
                raise EmbeddingError(f"Failed to generate embedding: {exc}") from exc

    @classmethod
    def generate_for(cls, items):
        return cls.generate_batch([item.to_embedding_text() for item in items])


def cosine_similarity(a, b):
    """Cosine of the angle between two vectors; 0.0 if either is all zeros."""
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


def f32_vec_to_bytes(vec):
    """Pack floats as little-endian 32-bit values."""
    vec = list(vec)
    return struct.pack(f"<{len(vec)}f", *vec)


def bytes_to_f32_vec(data):
    """Unpack little-endian 32-bit floats, ignoring a trailing partial chunk."""
    count = len(data) // 4
    return list(struct.unpack_from(f"<{count}f", data))


def generate_embeddings_batch(texts):
    """Embed several texts with the shared service."""
    return EmbeddingService.generate_batch(texts)