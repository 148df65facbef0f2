import math

import pytest

from pricecheck.embedding import (
    CosineSimilarity,
    Embeddable,
    EmbeddingError,
    EmbeddingService,
    HashingEmbedder,
    bytes_to_f32_vec,
    cosine_similarity,
    f32_vec_to_bytes,
    generate_embeddings_batch,
)


@pytest.fixture(autouse=True)
def _reset_backend():
    EmbeddingService.set_backend(None)
    yield
    EmbeddingService.set_backend(None)


def test_f32_vec_roundtrip():
    original = [1.0, 2.5, -3.14, 0.0]
    restored = bytes_to_f32_vec(f32_vec_to_bytes(original))
    assert restored == pytest.approx(original, rel=1e-6)
    assert restored[0] == 1.0 and restored[1] == 2.5 and restored[3] == 0.0
    assert bytes_to_f32_vec(f32_vec_to_bytes(restored)) == restored


def test_bytes_layout_is_little_endian_f32():
    assert f32_vec_to_bytes([1.0]) == b"\x00\x00\x80\x3f"
    assert len(f32_vec_to_bytes([0.0] * 384)) == 1536


def test_bytes_to_vec_drops_partial_chunk():
    assert bytes_to_f32_vec(b"\x00\x00\x80\x3f\x01\x02") == [1.0]


def test_cosine_similarity_identical():
    assert abs(cosine_similarity([1.0, 0.0, 0.0], [1.0, 0.0, 0.0]) - 1.0) < 0.001


def test_cosine_similarity_orthogonal():
    assert abs(cosine_similarity([1.0, 0.0, 0.0], [0.0, 1.0, 0.0])) < 0.001


def test_cosine_similarity_opposite():
    assert abs(cosine_similarity([1.0, 0.0, 0.0], [-1.0, 0.0, 0.0]) + 1.0) < 0.001


def test_cosine_similarity_zero_vector():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0


def test_cosine_scorer_is_match():
    scorer = CosineSimilarity(0.8)
    assert scorer.is_match([1.0, 0.0, 0.0], [1.0, 0.0, 0.0])
    assert not scorer.is_match([1.0, 0.0, 0.0], [0.0, 1.0, 0.0])


class _TestProduct(Embeddable):
    def __init__(self, name, brand):
        self.name = name
        self.brand = brand

    def to_embedding_text(self):
        return f"{self.brand} {self.name}" if self.brand else self.name


def test_embeddable_trait():
    class _Recorder:
        def __init__(self):
            self.seen = []

        def embed(self, texts):
            self.seen.extend(texts)
            return [[1.0] for _ in texts]

    recorder = _Recorder()
    EmbeddingService.set_backend(recorder)
    result = EmbeddingService.generate_for(
        [_TestProduct("Butter 500g", "Anchor"), _TestProduct("Pumpkin", "")]
    )
    assert recorder.seen == ["Anchor Butter 500g", "Pumpkin"]
    assert result == [[1.0], [1.0]]


def test_hashing_embedder_shape_and_norm():
    vectors = HashingEmbedder(64).embed(["Anchor Butter", ""])
    assert [len(v) for v in vectors] == [64, 64]
    assert math.isclose(math.sqrt(sum(x * x for x in vectors[0])), 1.0, rel_tol=1e-9)
    assert all(x == 0.0 for x in vectors[1])


def test_hashing_embedder_is_deterministic():
    first = HashingEmbedder().embed(["Fresh Milk 2L"])
    second = HashingEmbedder().embed(["Fresh Milk 2L"])
    assert first == second


def test_hashing_embedder_prefers_shared_words():
    query, related, unrelated = HashingEmbedder().embed(
        ["butter", "Anchor Butter 500g", "Wholemeal Bread"]
    )
    assert cosine_similarity(query, related) > cosine_similarity(query, unrelated)


def test_hashing_embedder_rejects_bad_dimensions():
    with pytest.raises(ValueError):
        HashingEmbedder(0)


def test_service_empty_batch_skips_backend():
    class _Exploding:
        def embed(self, texts):
            raise AssertionError("should not be called")

    EmbeddingService.set_backend(_Exploding())
    assert EmbeddingService.generate_batch([]) == []


def test_service_uses_custom_backend():
    class _Fixed:
        def embed(self, texts):
            return [[float(len(t))] for t in texts]

    EmbeddingService.set_backend(_Fixed())
    assert generate_embeddings_batch(["ab", "abcd"]) == [[2.0], [4.0]]
    assert EmbeddingService.generate("xyz") == [3.0]
    items = [_TestProduct("Milk", "Anchor")]
    assert EmbeddingService.generate_for(items) == [[float(len("Anchor Milk"))]]


def test_service_wraps_backend_failure():
    class _Broken:
        def embed(self, texts):
            raise RuntimeError("model missing")

    EmbeddingService.set_backend(_Broken())
    with pytest.raises(EmbeddingError, match="model missing"):
        EmbeddingService.generate_batch(["milk"])


def test_default_backend_dimensions():
    vector = EmbeddingService.generate("milk")
    assert len(vector) == 384
    assert cosine_similarity(vector, EmbeddingService.generate("milk")) == pytest.approx(1.0)