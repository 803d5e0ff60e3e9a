"""Configuration loading for storagemeter."""

import json
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from storagemeter.catalog import CategoryCatalog, catalog_from_layout
from storagemeter.errors import ConfigurationError
from storagemeter.formatting import parse_size
from storagemeter.models import AppLayout, Category, StorageConfig
from storagemeter.probe import expand_path

CONFIG_ENV = "STORAGEMETER_CONFIG"
CONFIG_DIR = expand_path("~/.storagemeter")
CONFIG_FILE = CONFIG_DIR / "config.json"


def default_config_path() -> Path:
    """Config file location, honouring STORAGEMETER_CONFIG."""
    env = os.environ.get(CONFIG_ENV)
    if env:
        return expand_path(env)
    return CONFIG_FILE


def load_config(path: Optional[Union[str, Path]] = None) -> StorageConfig:
    """
    Load configuration from a JSON file.

    A missing default config file gives the built-in defaults; a missing file
    that was asked for explicitly is an error.

    Raises:
        ConfigurationError: If the file is unreadable or invalid
    """
    explicit = path is not None
    config_path = expand_path(path) if explicit else default_config_path()

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"Config file not found: {config_path}")
        return StorageConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a JSON object")

    return parse_config(data)


def parse_config(data: dict) -> StorageConfig:
    """Validate a config mapping."""
    try:
        return StorageConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def resolve_limit(config: StorageConfig) -> Optional[int]:
    """Soft limit in bytes; zero or unset means unlimited."""
    return parse_size(config.storage_limit) or None


def build_catalog(config: StorageConfig) -> CategoryCatalog:
    """
    Build the category catalog described by a config.

    Paths are expanded and resolved against root_dir. Without categories or a
    layout, the catalog only holds the total category for root_dir.
    """
    root = os.path.abspath(expand_path(config.root_dir))

    if config.categories is not None and config.layout is not None:
        raise ConfigurationError("Configure either categories or layout, not both")

    if config.layout is not None:
        layout = AppLayout(
            **{
                field: str(expand_path(value, root))
                for field, value in config.layout.model_dump().items()
            }
        )
        return catalog_from_layout(layout, root)

    if config.categories is not None:
        categories = []
        for name, category in config.categories.items():
            for path in category.paths:
                if not path or not path.strip():
                    raise ConfigurationError(f"Category {name} has an empty path")
            categories.append(
                Category(
                    name=name,
                    paths=[str(expand_path(p, root)) for p in category.paths],
                    encloses=category.encloses,
                )
            )
        return CategoryCatalog(categories, total=config.total_category)

    return CategoryCatalog([Category(name=config.total_category, paths=[root])],
                           total=config.total_category)
