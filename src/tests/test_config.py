"""Unit tests for application configuration."""

from pathlib import Path
from unittest.mock import patch

from pagegraph.config import ProjectConfig, Settings, SourcesConfig


class TestSettings:
    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            s = Settings()
            assert s.config_path == Path("scrapbox-config.json")
            assert s.api_base_url == "https://scrapbox.io"
            assert s.debug is False
            assert s.app_title == "PageGraph"
            assert s.search_limit == 10

    def test_from_env(self):
        env = {
            "PAGEGRAPH_CONFIG_PATH": "/tmp/sources.yaml",
            "PAGEGRAPH_DEBUG": "true",
            "PAGEGRAPH_APP_TITLE": "MyGraph",
            "PAGEGRAPH_CACHE_TTL": "30",
        }
        with patch.dict("os.environ", env, clear=True):
            s = Settings()
            assert s.config_path == Path("/tmp/sources.yaml")
            assert s.debug is True
            assert s.app_title == "MyGraph"
            assert s.cache_ttl == 30.0

    def test_debug_false_values(self):
        with patch.dict("os.environ", {"PAGEGRAPH_DEBUG": "false"}, clear=True):
            s = Settings()
            assert s.debug is False


class TestSourcesConfig:
    def test_camel_case_keys(self):
        config = ProjectConfig.model_validate(
            {"name": "p", "exportDataPath": "data/p.json", "exportPaths": ["a.json", "b.json"]}
        )
        assert config.export_data_path == Path("data/p.json")
        assert config.export_paths == [Path("a.json"), Path("b.json")]

    def test_snake_case_keys(self):
        config = ProjectConfig(name="p", export_data_path="p.json")
        assert config.export_data_path == Path("p.json")

    def test_api_only_project(self):
        config = ProjectConfig(name="p")
        assert config.export_data_path is None
        assert config.export_paths == []

    def test_empty_sources(self):
        assert SourcesConfig().projects == []
