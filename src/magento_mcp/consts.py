"""High-value constants for the Magento MCP package."""

# Package metadata
PACKAGE_VERSION = "1.0.0"
SERVER_NAME = "magento-mcp"
USER_AGENT = f"{SERVER_NAME}/{PACKAGE_VERSION}"

# External API contract consts
TOKEN_URL_PATH = "/rest/V1/integration/admin/token"
SCHEMA_URL_PATH = "/rest/all/schema?services=all"

# MCP surface
SCHEMA_RESOURCE_URI = "magento://rest/schema"
SCHEMA_RESOURCE_NAME = "Magento REST API Schema"
REST_API_TOOL_NAME = "magento_rest_api"
SEARCH_SCHEMA_TOOL_NAME = "search_schema"
JSON_MIME_TYPE = "application/json"

# Business logic consts
TOKEN_REFRESH_BUFFER_SECONDS = 60  # refresh 1min early
SCHEMA_CACHE_TTL_SECONDS = 3600  # 1 hour
SCHEMA_CACHE_FILENAME = "magento_schema_cache.json"
