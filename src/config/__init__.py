"""Configuration module -- exports Settings, EngineConfig and load_config."""

from src.config.engine_config import EngineConfig
from src.config.loader import load_config
from src.config.settings import Settings

__all__ = ["EngineConfig", "Settings", "load_config"]
