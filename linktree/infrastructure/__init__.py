"""LinkTree Infrastructure Layer.

This layer provides the services used by the builder and the CLI:
- ConfigManager: Layered configuration from defaults, YAML, environment and CLI
- Logger: Structured logging system
"""

from .config_manager import ConfigManager, ConfigSource
from .logger import Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "ConfigManager",
    "ConfigSource",
]
