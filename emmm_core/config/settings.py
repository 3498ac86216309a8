"""
Configuration Settings
======================

Configuration dataclasses for the archive and image pipelines.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Dict, Any
import json
import logging

import yaml

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s.%(msecs)03d[%(levelname)s][%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d@%H:%M:%S"


@dataclass
class ArchiveConfig:
    """Container layout and compression configuration."""

    document_entry: str = "source.emmm"
    assets_dir: str = "assets"
    compression_level: int = 6  # Deflate level (0-9)


@dataclass
class EncoderConfig:
    """Size-bounded image encoder configuration."""

    quality: int = 80
    min_scale: float = 0.1
    search_rounds: int = 6
    passable_ratio: float = 0.9
    accepted_mime_types: List[str] = field(
        default_factory=lambda: ['image/jpeg', 'image/png']
    )


@dataclass
class CoreConfig:
    """
    Complete configuration.

    Example:
        config = CoreConfig()
        config.encoder.search_rounds = 3
        config.archive.compression_level = 9
        save_config(config, Path("emmm.yaml"))
    """

    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    encoder: EncoderConfig = field(default_factory=EncoderConfig)

    log_level: str = "INFO"

    # Custom extensions
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'archive': asdict(self.archive),
            'encoder': asdict(self.encoder),
            'log_level': self.log_level,
            'custom': self.custom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CoreConfig':
        """Create from dictionary."""
        config = cls()

        if 'archive' in data:
            config.archive = ArchiveConfig(**data['archive'])
        if 'encoder' in data:
            config.encoder = EncoderConfig(**data['encoder'])

        if 'log_level' in data:
            config.log_level = data['log_level']
        if 'custom' in data:
            config.custom = data['custom']

        return config


def load_config(config_path: Path) -> CoreConfig:
    """
    Load configuration from file.

    Supports JSON and YAML formats based on file extension.

    Args:
        config_path: Path to config file

    Returns:
        CoreConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is not supported
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f) or {}
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    logger.info(f"Loaded configuration from {config_path}")
    return CoreConfig.from_dict(data)


def save_config(config: CoreConfig, config_path: Path) -> None:
    """
    Save configuration to file.

    Supports JSON and YAML formats based on file extension.

    Args:
        config: CoreConfig to save
        config_path: Path to save config file

    Raises:
        ValueError: If file format is not supported
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()
    if suffix not in ['.yaml', '.yml', '.json']:
        raise ValueError(f"Unsupported config format: {suffix}")

    data = config.to_dict()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        if suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved configuration to {config_path}")


def get_default_config() -> CoreConfig:
    """Get default configuration."""
    return CoreConfig()


def configure_logging(level: str = "INFO") -> None:
    """
    Install a stream handler on the root logger.

    Only entry points call this; library modules just log.

    Args:
        level: Logging level name (DEBUG, INFO, ...)
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True,
    )
    # Pillow's plugin loader is chatty at DEBUG
    logging.getLogger("PIL").setLevel(max(numeric, logging.WARNING))
