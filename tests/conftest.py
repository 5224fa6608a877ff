"""Pytest configuration and shared fixtures"""

import base64
import json
import os
from unittest.mock import AsyncMock, Mock

import pytest

from magento_mcp.config import Config

BASE_URL = "https://test.magento.io"

SAMPLE_SCHEMA = {
    "swagger": "2.0",
    "info": {"title": "Magento Commerce", "version": "2.4"},
    "paths": {
        "/V1/customers/{customerId}": {
            "get": {
                "tags": ["customerCustomerRepositoryV1"],
                "summary": "Get customer by Customer ID.",
                "parameters": [{"name": "customerId", "in": "path"}],
            }
        },
        "/V1/orders": {
            "get": {
                "tags": ["salesOrderRepositoryV1"],
                "summary": "Lists orders that match specified search criteria.",
            }
        },
        "/V1/products": {
            "post": {
                "tags": ["catalogProductRepositoryV1"],
                "summary": "Create product",
            }
        },
    },
    "definitions": {
        "customer-data-customer-interface": {
            "type": "object",
            "description": "Customer interface.",
        }
    },
}


def encode_segment(raw: bytes) -> str:
    """Unpadded base64url, as used in JWT segments"""
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


JWT_HEADER = encode_segment(b'{"alg": "HS256", "typ": "JWT"}')
JWT_SIGNATURE = encode_segment(b"signature")


def make_jwt(payload) -> str:
    """Build a three-segment JWT carrying payload, with a dummy signature"""
    body = encode_segment(json.dumps(payload).encode("utf-8"))
    return f"{JWT_HEADER}.{body}.{JWT_SIGNATURE}"


def token_response(token: str, status_code: int = 200) -> Mock:
    """Mock httpx response for the admin token endpoint"""
    response = Mock()
    response.status_code = status_code
    response.is_error = status_code >= 400
    response.reason_phrase = "OK" if status_code < 400 else "Unauthorized"
    response.text = token
    return response


@pytest.fixture
def config(tmp_path):
    """Config with admin credentials and a temporary cache directory"""
    return Config(
        base_url=BASE_URL,
        admin_username="admin",
        admin_password="secret",
        cache_dir=str(tmp_path),
        log_level="DEBUG",
    )


@pytest.fixture
def static_config(tmp_path):
    """Config with only a static integration token"""
    return Config(
        base_url=BASE_URL,
        token="static-token",
        cache_dir=str(tmp_path),
    )


@pytest.fixture
def sample_schema():
    return json.loads(json.dumps(SAMPLE_SCHEMA))


@pytest.fixture
def mock_token_provider():
    provider = Mock()
    provider.get_token = AsyncMock(return_value="mock_token")
    return provider


@pytest.fixture
def clean_env():
    """Fixture that temporarily clears MAGENTO_MCP_* environment variables.

    This ensures Config tests see the true defaults without interference
    from environment variables that might be set in the user's shell.
    """
    saved = {
        key: value
        for key, value in os.environ.items()
        if key.startswith("MAGENTO_MCP_")
    }

    for key in saved:
        os.environ.pop(key, None)

    try:
        yield
    finally:
        for key, value in saved.items():
            os.environ[key] = value
