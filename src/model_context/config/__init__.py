from .loader import ConfigError, default_config, load_config, parse_config
from .models import AppConfig, LoggingConfig, ResourcesConfig, ServerConfig

# Config exports are intentionally small.
__all__ = [
    "AppConfig",
    "ConfigError",
    "LoggingConfig",
    "ResourcesConfig",
    "ServerConfig",
    "default_config",
    "load_config",
    "parse_config",
]
