"""Configuration - TOML files with profile overlays."""

from predswap.config.settings import Settings, configure_logging, get_settings, load_config

__all__ = ["Settings", "configure_logging", "get_settings", "load_config"]
