import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.shopify_client import ShopifyClientError, get_shopify_client
from tests.support import FakeStore


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def client(fake_store):
    app.dependency_overrides[get_shopify_client] = lambda: fake_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def remote_error():
    return ShopifyClientError("Shopify API error (422 Unprocessable Entity): asset: invalid", 422)
