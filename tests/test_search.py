"""
Tests for the Search Service

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import pytest

from frontrag_core.rag.search import SearchResult, SearchService, distance_to_score


class TestDistanceToScore:
    """Tests for distance -> similarity conversion."""

    @pytest.mark.parametrize("distance,score", [
        (0.0, 1.0),
        (0.5, 0.75),
        (1.5, 0.25),
        (2.0, 0.0),
        (3.7, 0.0),
    ])
    def test_conversion(self, distance, score):
        assert distance_to_score(distance) == pytest.approx(score)

    def test_negative_distance_is_capped(self):
        assert distance_to_score(-0.4) == 1.0


class TestSearchResult:

    def test_title_fallback(self):
        assert SearchResult(content="x", score=0.5).title == "Guideline"
        assert SearchResult(content="x", score=0.5, metadata={"title": "Grid"}).title == "Grid"


class TestSearchService:
    """Tests for SearchService against an in-memory collection."""

    @pytest.fixture
    def collection(self, seed, make_collection):
        coll = make_collection("test")
        seed(coll, [
            {"id": "a", "content": "button padding", "metadata": {"type": "style", "title": "A"}},
            {"id": "b", "content": "button colors", "metadata": {"type": "style", "title": "B"}},
            {"id": "c", "content": "modal focus", "metadata": {"type": "component", "title": "C"}},
            {"id": "d", "content": "form layout", "metadata": {"type": "style", "title": "D"}},
        ], distances={"a": 0.2, "b": 0.6, "c": 1.0, "d": 1.5})
        return coll

    @pytest.mark.asyncio
    async def test_threshold_drops_low_scores(self, seed, make_collection):
        coll = make_collection("single")
        seed(coll, [{"id": "x", "content": "button"}], distances={"x": 1.5})

        results = await SearchService().search(coll, "button", threshold=0.9)
        assert results == []

    @pytest.mark.asyncio
    async def test_sorted_and_bounded(self, collection):
        results = await SearchService().search(collection, "button", max_results=3, threshold=0.0)

        assert len(results) == 3
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert [r.metadata["title"] for r in results] == ["A", "B", "C"]
        assert results[0].score == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_defaults(self, collection):
        results = await SearchService().search(collection, "button")
        assert collection.last_query["n_results"] == 5
        assert len(results) == 4

    @pytest.mark.asyncio
    async def test_filter_is_passed_as_where(self, collection):
        results = await SearchService().search(collection, "button", filter={"type": "component"})
        assert collection.last_query["where"] == {"type": "component"}
        assert [r.metadata["title"] for r in results] == ["C"]

    @pytest.mark.asyncio
    async def test_query_error_yields_empty(self, collection):
        collection.fail_queries = True
        assert await SearchService().search(collection, "button") == []

    @pytest.mark.asyncio
    async def test_search_by_embedding(self, collection, embedding_service):
        service = SearchService(embedding_service)
        results = await service.search_by_embedding(collection, "button", max_results=2)

        assert collection.last_query["query_embeddings"] == [[6.0, 1.0, 1.0]]
        assert collection.last_query["query_texts"] is None
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_search_by_embedding_requires_service(self, collection):
        with pytest.raises(RuntimeError):
            await SearchService().search_by_embedding(collection, "button")

    @pytest.mark.asyncio
    async def test_semantic_search(self, collection):
        results = await SearchService().semantic_search(collection, "button", context="style")

        assert collection.last_query["query_texts"] == ["style button"]
        assert collection.last_query["n_results"] == 10
        assert all(r.score >= 0.6 for r in results)
        assert [r.metadata["title"] for r in results] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_search_by_embedding_backend_unavailable(self, collection, embedding_service, monkeypatch):
        def missing_backend():
            raise ImportError("sentence-transformers is not installed")

        monkeypatch.setattr(embedding_service, "_ensure_embedding_fn", missing_backend)

        results = await SearchService(embedding_service).search_by_embedding(collection, "button")
        assert results == []
        assert collection.last_query == {}
