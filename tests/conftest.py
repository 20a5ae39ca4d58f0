"""
Pytest configuration and shared fixtures for eligibility scanner tests.
"""

import pytest

from scripts.lib.injective_client import InjectiveClient
from scripts.lib.models import NINJA_CONTRACT, QUANT_CONTRACT, Collection, TrackedCollections


@pytest.fixture
def sample_address():
    """Sample Injective account address for testing."""
    return "inj1cml96vmptgw99syqrrz8az79xer2pcgp0a885r"


@pytest.fixture
def other_address():
    """A second Injective account address."""
    return "inj14au322k9munkmx5wrchz9q30juf5wjgz2cfqku"


@pytest.fixture
def rpc_url():
    return "https://lcd.example.com"


@pytest.fixture
def indexer_url():
    return "https://indexer.example.com"


@pytest.fixture
def catalog_url():
    return "https://catalog.example.com/v1"


@pytest.fixture
def mock_catalog_api_key():
    """Mock catalog API key for testing."""
    return "test-api-key-12345"


@pytest.fixture
def tracked():
    """The two tracked collections, in configured order."""
    return TrackedCollections(
        [
            Collection(QUANT_CONTRACT, "quant", family_name="Quants"),
            Collection(NINJA_CONTRACT, "ninja"),
        ]
    )


@pytest.fixture
def client(rpc_url, indexer_url):
    """InjectiveClient pointed at the mock endpoints."""
    return InjectiveClient(rpc_url, indexer_url, timeout=5)
