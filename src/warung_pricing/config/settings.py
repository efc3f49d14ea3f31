"""
Centralized settings and path configuration for the pricing service.
"""
import logging
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from .. import __version__


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('true', '1', 'yes', 'on')


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Store keys (one JSON document per key under data_dir)
    markup_rules_key: str = 'warungpos_markup_rules'
    categories_key: str = 'db_categories'
    products_key: str = 'db_products'

    # Pricing
    rounding_unit: int = 1000
    reject_overlapping_bands: bool = False

    # Misc
    log_level: str = 'INFO'
    app_version: str = __version__
    backup_version: int = 2

    @classmethod
    def load(cls, project_root: Optional[Path] = None, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        env_data_dir = os.environ.get('WARUNG_DATA_DIR')
        if data_dir is None:
            data_dir = Path(env_data_dir) if env_data_dir else root / 'data'

        return cls(
            project_root=root,
            data_dir=data_dir,
            reject_overlapping_bands=_env_flag('WARUNG_REJECT_OVERLAPS'),
            log_level=os.environ.get('WARUNG_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def configure_logging(settings: Optional[Settings] = None):
    """Configure root logging once for the API and UI entry points."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger(__name__).debug("Logging configured at %s", settings.log_level)
