"""
Tests for the RAG Engine (multi-collection indexing and weighted search)

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import pytest

from frontrag_core.project.config import ProjectConfig, default_project_config
from frontrag_core.rag.engine import (
    IndexResult,
    RAGEngineError,
    exported_component_name,
)


def make_project(root, priority: float = 1.0, collection: str = None) -> ProjectConfig:
    project = default_project_config("my-app", "My App", root_path=str(root))
    project.priority = priority
    project.vector_db_collection = collection
    return project


class TestLifecycle:
    """initialize / load_project / collection naming."""

    @pytest.mark.asyncio
    async def test_initialize_creates_default_collection(self, engine, fake_client):
        await engine.initialize()
        assert "mcp_frontend_default" in fake_client.collections

    @pytest.mark.asyncio
    async def test_initialize_reuses_existing_collection(self, engine, fake_client, seed):
        existing = await fake_client.create_collection("mcp_frontend_default")
        seed(existing, [{"content": "kept"}])

        await engine.initialize()
        assert await fake_client.collections["mcp_frontend_default"].count() == 1

    @pytest.mark.asyncio
    async def test_unreachable_store_is_fatal(self, engine, fake_client):
        fake_client.alive = False
        with pytest.raises(RAGEngineError, match="Is ChromaDB running"):
            await engine.initialize()

    def test_collection_name(self, engine, tmp_path):
        assert engine.collection_name_for(make_project(tmp_path)) == "mcp_frontend_my-app"
        assert engine.collection_name_for(make_project(tmp_path, collection="custom")) == "custom"

    @pytest.mark.asyncio
    async def test_load_project(self, ready_engine, fake_client, tmp_path):
        project = make_project(tmp_path)
        assert ready_engine.get_current_project() is None

        await ready_engine.load_project(project)

        assert ready_engine.get_current_project() is project
        assert "mcp_frontend_my-app" in fake_client.collections
        info = await ready_engine.get_collection_info()
        assert info == {"name": "mcp_frontend_my-app", "count": 0}

    @pytest.mark.asyncio
    async def test_collection_info_without_project(self, ready_engine):
        assert await ready_engine.get_collection_info() == {"name": None, "count": 0}

    @pytest.mark.asyncio
    async def test_list_all_collections(self, ready_engine, fake_client, seed, tmp_path):
        await ready_engine.load_project(make_project(tmp_path))
        seed(fake_client.collections["mcp_frontend_my-app"], [{"content": "a"}, {"content": "b"}])

        collections = await ready_engine.list_all_collections()
        assert {"name": "mcp_frontend_default", "count": 0} in collections
        assert {"name": "mcp_frontend_my-app", "count": 2} in collections


class TestIndexing:
    """index_guidelines / index_default_guidelines."""

    @pytest.mark.asyncio
    async def test_force_index_counts_files(self, ready_engine, fake_client, sample_project):
        project = make_project(sample_project)

        result = await ready_engine.index_guidelines(project, force=True)

        assert result == IndexResult(documents_indexed=3, collection_name="mcp_frontend_my-app")
        collection = fake_client.collections["mcp_frontend_my-app"]
        assert await collection.count() == 3
        assert collection.add_calls == 1

    @pytest.mark.asyncio
    async def test_force_rebuilds_from_scratch(self, ready_engine, fake_client, sample_project):
        project = make_project(sample_project)
        await ready_engine.load_project(project)

        await ready_engine.index_guidelines(project, force=True)
        result = await ready_engine.index_guidelines(project, force=True)

        assert result.documents_indexed == 3
        assert fake_client.deleted == ["mcp_frontend_my-app", "mcp_frontend_my-app"]
        # the live project handle follows the recreated collection
        assert await ready_engine.get_collection_info() == {"name": "mcp_frontend_my-app", "count": 3}

    @pytest.mark.asyncio
    async def test_force_on_missing_collection(self, ready_engine, fake_client, sample_project):
        result = await ready_engine.index_guidelines(make_project(sample_project), force=True)
        assert result.documents_indexed == 3
        assert fake_client.deleted == []

    @pytest.mark.asyncio
    async def test_existing_collection_short_circuits(self, ready_engine, fake_client, sample_project, write_file):
        project = make_project(sample_project)
        await ready_engine.index_guidelines(project, force=True)
        write_file(sample_project / ".mcp-guidelines" / "extra.md", "More rules")

        result = await ready_engine.index_guidelines(project)

        assert result.documents_indexed == 3
        assert fake_client.collections["mcp_frontend_my-app"].add_calls == 1

    @pytest.mark.asyncio
    async def test_no_documents(self, ready_engine, tmp_path):
        result = await ready_engine.index_guidelines(make_project(tmp_path / "empty"))
        assert result.documents_indexed == 0

    @pytest.mark.asyncio
    async def test_index_default_sections(self, ready_engine, fake_client, write_file, tmp_path):
        default_dir = tmp_path / "shared"
        write_file(
            default_dir / "styles.md",
            "---\ntitle: Styles\ntype: style\n---\nIntro\n\n## Colors\nTokens.\n\n## Spacing\n8px.\n",
        )

        result = await ready_engine.index_default_guidelines(default_dir, sections=True)

        assert result.documents_indexed == 3
        assert result.collection_name == "mcp_frontend_default"
        assert fake_client.collections["mcp_frontend_default"].ids[1] == "styles.md_section_1"

    @pytest.mark.asyncio
    async def test_index_default_whole_files(self, ready_engine, write_file, tmp_path):
        write_file(tmp_path / "default-guidelines" / "a.md", "A")
        write_file(tmp_path / "default-guidelines" / "b.md", "B")

        result = await ready_engine.index_default_guidelines()
        assert result.documents_indexed == 2

        again = await ready_engine.index_default_guidelines()
        assert again.documents_indexed == 2


class TestSearch:
    """Fan-out search, weighting and merge."""

    async def _setup(self, engine, client, tmp_path, priority=1.0):
        await engine.initialize()
        await engine.load_project(make_project(tmp_path, priority=priority))
        project = client.collections["mcp_frontend_my-app"]
        default = client.collections["mcp_frontend_default"]
        return project, default

    @pytest.mark.asyncio
    async def test_sources_are_tagged(self, engine, fake_client, seed, tmp_path):
        project, default = await self._setup(engine, fake_client, tmp_path)
        seed(project, [{"id": "p1", "content": "project rule"}], distances={"p1": 0.2})
        seed(default, [{"id": "d1", "content": "default rule"}], distances={"d1": 0.4})

        results = await engine.search("rule")

        assert [r.source for r in results] == ["project", "default"]
        assert results[0].score == pytest.approx(0.9)
        assert results[1].score == pytest.approx(0.8)

    @pytest.mark.asyncio
    async def test_priority_weighting(self, engine, fake_client, seed, tmp_path):
        project, default = await self._setup(engine, fake_client, tmp_path, priority=0.5)
        seed(project, [{"id": "p1", "content": "project rule"}], distances={"p1": 0.4})
        seed(default, [{"id": "d1", "content": "default rule"}], distances={"d1": 1.0})

        results = await engine.search("rule")

        assert [r.source for r in results] == ["default", "project"]
        assert results[1].score == pytest.approx(0.4)

    @pytest.mark.asyncio
    async def test_threshold_applies_before_weighting(self, engine, fake_client, seed, tmp_path):
        project, _ = await self._setup(engine, fake_client, tmp_path, priority=2.0)
        seed(project, [{"id": "p1", "content": "rule"}], distances={"p1": 1.0})

        assert await engine.search("rule", threshold=0.6) == []

        results = await engine.search("rule", threshold=0.5)
        assert results[0].score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_max_results_bounds_merged_output(self, engine, fake_client, seed, tmp_path):
        project, default = await self._setup(engine, fake_client, tmp_path)
        seed(project, [{"id": f"p{i}", "content": "rule"} for i in range(3)],
             distances={"p0": 0.1, "p1": 0.3, "p2": 0.5})
        seed(default, [{"id": f"d{i}", "content": "rule"} for i in range(3)],
             distances={"d0": 0.2, "d1": 0.4, "d2": 0.6})

        results = await engine.search("rule", max_results=4)

        assert len(results) == 4
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert [r.source for r in results] == ["project", "default", "project", "default"]

    @pytest.mark.asyncio
    async def test_default_only_without_project(self, ready_engine, fake_client, seed):
        seed(fake_client.collections["mcp_frontend_default"], [{"content": "grid rule"}])
        results = await ready_engine.search("grid rule")
        assert len(results) == 1
        assert results[0].source == "default"

    @pytest.mark.asyncio
    async def test_context_filters_on_type(self, ready_engine, fake_client, seed):
        default = fake_client.collections["mcp_frontend_default"]
        seed(default, [
            {"content": "button style", "metadata": {"type": "style"}},
            {"content": "button component", "metadata": {"type": "component"}},
        ])

        results = await ready_engine.search("button", context="component")

        assert default.last_query["where"] == {"type": "component"}
        assert [r.metadata["type"] for r in results] == ["component"]

    @pytest.mark.asyncio
    async def test_configured_threshold(self, ready_engine, fake_client, seed):
        ready_engine.config.search.threshold = 0.7
        seed(fake_client.collections["mcp_frontend_default"], [{"id": "d", "content": "x"}], distances={"d": 1.5})
        assert await ready_engine.search("x") == []


class TestTemplatesAndStyle:
    """get_template / validate_style."""

    @pytest.mark.asyncio
    async def test_get_template(self, ready_engine, fake_client, seed):
        seed(fake_client.collections["mcp_frontend_default"], [{
            "content": "export function Modal() {}",
            "metadata": {"type": "template", "componentType": "modal"},
        }])
        assert await ready_engine.get_template("modal") == "export function Modal() {}"

    @pytest.mark.asyncio
    async def test_get_template_none(self, ready_engine, fake_client, seed):
        seed(fake_client.collections["mcp_frontend_default"], [
            {"content": "modal spacing", "metadata": {"type": "style"}},
        ])
        assert await ready_engine.get_template("modal") is None

    @pytest.mark.asyncio
    async def test_validate_style_naming_rule(self, ready_engine, fake_client, seed):
        seed(fake_client.collections["mcp_frontend_default"], [{
            "content": "tsx style rules validation naming",
            "metadata": {"type": "style", "ruleType": "naming", "suggestion": "Name components in PascalCase"},
        }])

        bad = await ready_engine.validate_style("export default function button() {}", "tsx")
        assert not bad.is_valid
        assert bad.violations == ["Component names should start with uppercase letter"]
        assert bad.suggestions == ["Name components in PascalCase"]

        good = await ready_engine.validate_style("export const Button = () => null", "tsx")
        assert good.is_valid

        other = await ready_engine.validate_style("export default function button() {}", "ts")
        assert other.is_valid

    def test_exported_component_name(self):
        assert exported_component_name("export default function Card() {}") == "Card"
        assert exported_component_name("export const useThing = 1") == "useThing"
        assert exported_component_name("const x = 1") is None
