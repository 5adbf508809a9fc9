"""Pydantic models for connection settings and table metadata."""

from .config import ConnectionConfig
from .table import Statement, TableShape

__all__ = [
    "ConnectionConfig",
    "Statement",
    "TableShape",
]
