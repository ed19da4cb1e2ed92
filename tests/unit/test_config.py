"""Unit tests for EngineConfig and the YAML config loader."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config.engine_config import EngineConfig
from src.config.loader import load_config
from src.config.settings import Settings
from src.models.cache import ArtifactKind


class TestEngineConfig:
    def test_defaults(self) -> None:
        config = EngineConfig()
        assert config.ttl_for(ArtifactKind.INFLUENCERS) == timedelta(hours=6)
        assert config.ttl_for(ArtifactKind.COMPETITORS) == timedelta(hours=6)
        assert config.ttl_for(ArtifactKind.CAMPAIGNS) == timedelta(hours=24)
        assert config.stream_pacing_seconds == 0.05
        assert config.default_stream_count == 6
        assert config.single_flight is False

    def test_min_cached(self) -> None:
        config = EngineConfig()
        assert config.min_cached_for(ArtifactKind.INFLUENCERS, 10) == 5
        assert config.min_cached_for(ArtifactKind.INFLUENCERS, 3) == 3
        assert config.min_cached_for(ArtifactKind.CAMPAIGNS, 10) == 10

    def test_keywords_per_platform(self) -> None:
        config = EngineConfig()
        assert config.keywords_for("instagram") == 2
        assert config.keywords_for("linkedin") == 1
        assert config.keywords_for("facebook") == 1

    def test_from_mapping_ignores_unknown_keys(self) -> None:
        config = EngineConfig.from_mapping(
            {"campaign_ttl_hours": 12, "narrow_platforms": ["tiktok"], "surprise": True}
        )
        assert config.campaign_ttl_hours == 12
        assert config.keywords_for("tiktok") == 1
        assert config.keywords_for("linkedin") == 2
        assert EngineConfig.from_mapping(None) == EngineConfig()

    def test_rejects_non_positive_timeouts(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(search_timeout_seconds=0)


class TestLoadConfig:
    def test_yaml_merged_with_settings(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "engine:\n  discovery_ttl_hours: 3\n"
            "cache:\n  backend: memory\n  db_path: ignored.db\n"
        )
        settings = Settings(cache_backend="sqlite", cache_db_path="data/x.db", openai_api_key="sk", anthropic_api_key="")

        config = load_config(str(path), settings=settings)

        assert config["engine"]["discovery_ttl_hours"] == 3
        assert config["cache"] == {"backend": "sqlite", "db_path": "data/x.db"}
        assert config["llm"]["available_providers"] == ["openai"]

    def test_missing_file(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=Settings())
        assert "engine" not in config
        assert config["logging"]["level"]

    def test_repo_config_parses(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        raw = load_config(str(repo_config), settings=Settings())
        config = EngineConfig.from_mapping(raw["engine"])
        assert config == EngineConfig()
