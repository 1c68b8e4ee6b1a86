# modelsync Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from modelsync.config.defaults import DEFAULT_CONFIG, generate_default_config, get_default_config
from modelsync.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    load_config_or_default,
    save_config,
    validate_config_file,
)
from modelsync.config.schema import (
    ConflictConfig,
    ConflictStrategy,
    ModelSyncConfig,
    OutputConfig,
    ProxyConfig,
    RepositoryConfig,
    TransportSettings,
)

__all__ = [
    # Schema
    "ModelSyncConfig",
    "RepositoryConfig",
    "TransportSettings",
    "ProxyConfig",
    "ConflictConfig",
    "ConflictStrategy",
    "OutputConfig",
    # Loader
    "load_config",
    "load_config_or_default",
    "save_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "get_default_config",
    "generate_default_config",
]
