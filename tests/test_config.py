"""
Tests for configuration loading and logging setup

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
import os

import pytest

from frontrag_core.config import FrontRAGConfig, LoggingConfig, find_config_file, load_config
from frontrag_core.logging_utils import (
    SecretMaskingFilter,
    get_log_file,
    mask_secrets,
    setup_logging,
)
from frontrag_core.rag.embeddings import EmbeddingService

ENV_VARS = [
    "CHROMA_DB_HOST", "CHROMA_DB_PORT", "DEFAULT_COLLECTION", "COLLECTION_PREFIX",
    "EMBEDDING_BACKEND", "EMBEDDING_MODEL", "OPENAI_API_KEY",
    "MAX_SEARCH_RESULTS", "SIMILARITY_THRESHOLD",
    "FRONTEND_RAG_DATA_DIR", "CHROMA_DB_DATA", "DEFAULT_GUIDELINES_DIR",
    "LOG_LEVEL", "LOG_DIR", "AUTO_DETECT",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestLoadConfig:

    def test_defaults(self, clean_env, tmp_path):
        config = load_config(tmp_path / "absent.yaml", use_dotenv=False)

        assert config.chroma.host == "localhost"
        assert config.chroma.port == 8000
        assert config.chroma.default_collection == "mcp_frontend_default"
        assert config.search.max_results == 5
        assert config.search.threshold == 0.7
        assert config.server.auto_detect is False

    def test_yaml_file(self, clean_env, tmp_path):
        path = tmp_path / "frontrag.yaml"
        path.write_text(
            "chroma:\n  host: chroma.local\n  port: 9000\n"
            "search:\n  max_results: 8\n  threshold: 0.5\n"
            "paths:\n  data_dir: /srv/frontrag\n"
            "logging:\n  level: debug\n"
        )

        config = load_config(path, use_dotenv=False)

        assert config.chroma.host == "chroma.local"
        assert config.chroma.port == 9000
        assert config.search.max_results == 8
        assert config.search.threshold == 0.5
        assert config.paths.registry_path.as_posix() == "/srv/frontrag/projects/registry.json"
        assert config.logging.level == "DEBUG"

    def test_env_overrides_file(self, clean_env, tmp_path):
        path = tmp_path / "frontrag.yaml"
        path.write_text("chroma:\n  host: from-file\n")
        clean_env.setenv("CHROMA_DB_HOST", "from-env")
        clean_env.setenv("SIMILARITY_THRESHOLD", "0.4")
        clean_env.setenv("AUTO_DETECT", "true")
        clean_env.setenv("OPENAI_API_KEY", "sk-test")

        config = load_config(path, use_dotenv=False)

        assert config.chroma.host == "from-env"
        assert config.search.threshold == 0.4
        assert config.server.auto_detect is True
        assert config.embedding.api_key == "sk-test"
        assert config.to_dict()["embedding"]["api_key"] == "***"

    def test_env_paths_expand_home(self, clean_env, tmp_path):
        clean_env.setenv("HOME", str(tmp_path))
        clean_env.setenv("FRONTEND_RAG_DATA_DIR", "~/frontrag-data")
        clean_env.setenv("LOG_DIR", "~/logs")

        config = load_config(tmp_path / "absent.yaml", use_dotenv=False)

        assert config.paths.data_dir == str(tmp_path / "frontrag-data")
        assert config.paths.registry_path == tmp_path / "frontrag-data" / "projects" / "registry.json"
        assert config.logging.log_dir == str(tmp_path / "logs")

    def test_malformed_yaml_uses_defaults(self, clean_env, tmp_path):
        path = tmp_path / "frontrag.yaml"
        path.write_text("chroma: [unclosed\n")
        config = load_config(path, use_dotenv=False)
        assert config.chroma.host == "localhost"

    @pytest.mark.parametrize("name,value", [
        ("SIMILARITY_THRESHOLD", "1.5"),
        ("MAX_SEARCH_RESULTS", "0"),
        ("CHROMA_DB_PORT", "70000"),
    ])
    def test_invalid_values_raise(self, clean_env, tmp_path, name, value):
        clean_env.setenv(name, value)
        with pytest.raises(ValueError):
            load_config(tmp_path / "absent.yaml", use_dotenv=False)

    def test_dotenv(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("DEFAULT_COLLECTION=from_dotenv\n")
        try:
            config = load_config(tmp_path / "absent.yaml")
            assert config.chroma.default_collection == "from_dotenv"
        finally:
            os.environ.pop("DEFAULT_COLLECTION", None)

    def test_find_config_file_upward(self, tmp_path):
        (tmp_path / ".frontrag").mkdir()
        (tmp_path / ".frontrag" / "frontrag.yaml").write_text("{}")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (tmp_path / ".frontrag" / "frontrag.yaml").resolve()

    def test_ensure_dirs(self, tmp_path):
        config = FrontRAGConfig()
        config.paths.data_dir = str(tmp_path / "data")
        config.paths.ensure_dirs()
        assert config.paths.projects_dir.is_dir()
        assert config.paths.chroma_dir == tmp_path / "data" / "chroma_data"
        assert config.paths.chroma_dir.is_dir()


class TestEmbeddingService:

    def test_openai_requires_key(self):
        config = FrontRAGConfig().embedding
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            EmbeddingService(config)

    def test_injected_function(self, embedding_service):
        assert embedding_service.generate_embedding("a b") == [3.0, 2.0, 1.0]
        assert embedding_service.generate_batch_embeddings([]) == []
        assert len(embedding_service.generate(["x", "y"])) == 2

    def test_backend_failure_is_wrapped(self):
        def broken(input):
            raise OSError("model missing")

        service = EmbeddingService(FrontRAGConfig().embedding, embedding_function=broken)
        with pytest.raises(RuntimeError):
            service.generate_embedding("x")


class TestLogging:

    def test_mask_secrets(self):
        assert "sk-abcdefghijklmnopqrstuv" not in mask_secrets("key sk-abcdefghijklmnopqrstuv used")
        assert mask_secrets("OPENAI_API_KEY=abc123") == "OPENAI_API_KEY=***"
        assert mask_secrets("Authorization: Bearer xyz.abc") == "Authorization: Bearer ***"

    def test_filter_rewrites_record(self):
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "token %s", ("abcdef",), None)
        assert SecretMaskingFilter().filter(record) is True
        assert record.getMessage() == "token ***"

    def test_log_file_name(self, tmp_path):
        from datetime import datetime
        assert get_log_file(tmp_path, datetime(2026, 10, 19)).name == "frontrag-2026-10-19.log"

    def test_setup_logging_is_reentrant(self, tmp_path):
        root = logging.getLogger()
        before = list(root.handlers)
        try:
            setup_logging(LoggingConfig(level="DEBUG", log_dir=str(tmp_path)))
            setup_logging(LoggingConfig(level="INFO", log_dir=str(tmp_path)))

            ours = [h for h in root.handlers if getattr(h, "_frontrag", False)]
            assert len(ours) == 2
            assert root.level == logging.INFO
            assert any(p.suffix == ".log" for p in tmp_path.iterdir())
        finally:
            for handler in list(root.handlers):
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()
