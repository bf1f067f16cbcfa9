"""Configuration package."""

from scenario_engine.config.settings import EngineSettings

__all__ = ["EngineSettings"]
