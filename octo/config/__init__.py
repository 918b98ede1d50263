"""Configuration for the read pipeline."""

from octo.config.loader import ReadConfigLoader, load_read_config
from octo.config.schema import DebugAssetsConfig, ImageConfig, ReadToolConfig

__all__ = [
    "DebugAssetsConfig",
    "ImageConfig",
    "ReadConfigLoader",
    "ReadToolConfig",
    "load_read_config",
]
