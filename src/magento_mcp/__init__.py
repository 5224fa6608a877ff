"""Magento MCP Server Package

A Model Context Protocol (MCP) server for the Magento REST API, with a
cached, searchable schema resource and admin token management.
"""

from .auth import AuthManager
from .cache import CacheState, SchemaStore
from .client import MagentoClient, get_client
from .config import Config, get_config
from .consts import PACKAGE_VERSION
from .exceptions import (
    CacheCorrupted,
    ConfigError,
    InvalidSearchPattern,
    InvalidTokenFormat,
    InvalidToolArguments,
    MagentoMCPError,
    NotFoundError,
    TokenRefreshFailed,
)
from .schema import SchemaManager, get_schema_manager
from .search import parse_query, search_schema
from .tokens import decode_token_expiry

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "get_config",
    "get_client",
    "get_schema_manager",
    "decode_token_expiry",
    "parse_query",
    "search_schema",
    "AuthManager",
    "CacheState",
    "Config",
    "MagentoClient",
    "SchemaManager",
    "SchemaStore",
    "MagentoMCPError",
    "ConfigError",
    "InvalidTokenFormat",
    "TokenRefreshFailed",
    "CacheCorrupted",
    "InvalidSearchPattern",
    "InvalidToolArguments",
    "NotFoundError",
]
