"""Configuration for docbridge stores."""

from docbridge.config.settings import ObservabilitySettings, Settings, StoreSettings

__all__ = ["ObservabilitySettings", "Settings", "StoreSettings"]
