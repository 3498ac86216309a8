"""
Configuration Management
========================

Configuration utilities for the archive and image pipelines.
"""

from emmm_core.config.settings import (
    CoreConfig,
    ArchiveConfig,
    EncoderConfig,
    load_config,
    save_config,
    get_default_config,
    configure_logging,
)

__all__ = [
    "CoreConfig",
    "ArchiveConfig",
    "EncoderConfig",
    "load_config",
    "save_config",
    "get_default_config",
    "configure_logging",
]
