"""Fixtures for live Cider tests.

These tests run against a running Cider instance with its RPC server
enabled. They are skipped unless CIDER_URL is set.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from cider_api import CiderClient


@pytest.fixture
def live_cider_url() -> str | None:
    """Get live Cider URL from environment."""
    return os.environ.get("CIDER_URL")


@pytest.fixture
def live_cider_token() -> str | None:
    """Get live Cider API token from environment."""
    return os.environ.get("CIDER_API_TOKEN")


@pytest.fixture
def requires_live_cider(live_cider_url: str | None) -> None:
    """Skip test if no live Cider instance is configured."""
    if not live_cider_url:
        pytest.skip("CIDER_URL required for live tests")


@pytest_asyncio.fixture
async def live_client(
    live_cider_url: str | None,
    live_cider_token: str | None,
    requires_live_cider: None,
) -> AsyncGenerator[CiderClient]:
    """Create client connected to the live Cider instance."""
    assert live_cider_url is not None
    client = CiderClient.from_base_url(live_cider_url, api_token=live_cider_token)
    yield client
    await client.close()
