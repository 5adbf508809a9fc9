"""Core database operations layer."""

from .config_store import (
    DEFAULT_CONFIG_PATH,
    default_config_path,
    load_config,
    read_config,
    write_config,
)
from .connection import DatabaseConnection
from .credentials import resolve_password
from .executor import QueryExecutor

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DatabaseConnection",
    "QueryExecutor",
    "default_config_path",
    "load_config",
    "read_config",
    "resolve_password",
    "write_config",
]
