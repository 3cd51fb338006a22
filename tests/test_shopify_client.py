import base64

import pytest
import requests

from app.services.shopify_client import (
    ShopifyAuthError, ShopifyClient, ShopifyClientError,
    ShopifyNotConfiguredError, ShopifyRateLimitError, normalize_shop_domain
)
from tests.support import FakeResponse


class RecordingSession:
    """Returns queued responses and records each request"""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def shopify():
    return ShopifyClient("https://demo.myshopify.com/", "shpat_test_token_1234567890", api_version="2025-01")


def use_responses(client, *responses):
    session = RecordingSession(responses)
    client.session.request = session.request
    return session


def test_normalize_shop_domain():
    assert normalize_shop_domain("https://demo.myshopify.com/") == "demo.myshopify.com"
    assert normalize_shop_domain("demo.myshopify.com") == "demo.myshopify.com"


def test_base_url_and_auth_header(shopify):
    assert shopify.base_url == "https://demo.myshopify.com/admin/api/2025-01"
    assert shopify.session.headers["X-Shopify-Access-Token"] == "shpat_test_token_1234567890"


def test_unconfigured_client_raises_on_use():
    client = ShopifyClient("", "")
    assert not client.is_configured
    with pytest.raises(ShopifyNotConfiguredError):
        client.get_products()


def test_upload_image_puts_theme_asset(shopify):
    session = use_responses(
        shopify,
        FakeResponse(payload={"themes": [{"id": 828155753, "role": "main"}]}),
        FakeResponse(payload={"asset": {"key": "assets/sunset-1.png",
                                        "public_url": "https://cdn.shopify.com/s/files/sunset-1.png"}}),
    )

    url = shopify.upload_image(b"\x89PNG", "sunset-1.png", "sunset")

    assert url == "https://cdn.shopify.com/s/files/sunset-1.png"
    method, theme_url, kwargs = session.calls[0]
    assert method == "GET" and theme_url.endswith("/themes.json")
    assert kwargs["params"] == {"role": "main"}
    method, asset_url, kwargs = session.calls[1]
    assert method == "PUT"
    assert asset_url == "https://demo.myshopify.com/admin/api/2025-01/themes/828155753/assets.json"
    assert kwargs["json"]["asset"]["key"] == "assets/sunset-1.png"
    assert base64.b64decode(kwargs["json"]["asset"]["attachment"]) == b"\x89PNG"


def test_upload_image_without_public_url_fails(shopify):
    use_responses(
        shopify,
        FakeResponse(payload={"themes": [{"id": 1}]}),
        FakeResponse(payload={"asset": {"key": "assets/a.png"}}),
    )
    with pytest.raises(ShopifyClientError):
        shopify.upload_image(b"x", "a.png", "a")


def test_upload_image_without_theme_fails(shopify):
    use_responses(shopify, FakeResponse(payload={"themes": []}))
    with pytest.raises(ShopifyClientError, match="No published theme"):
        shopify.upload_image(b"x", "a.png", "a")


def test_unauthorized_maps_to_auth_error(shopify):
    use_responses(shopify, FakeResponse(
        status_code=401, reason="Unauthorized",
        payload={"errors": "[API] Invalid API key or access token"}
    ))

    with pytest.raises(ShopifyAuthError) as exc_info:
        shopify.get_products(10)

    assert exc_info.value.status_code == 401
    assert "Invalid API key" in str(exc_info.value)


def test_rate_limit_maps_to_rate_limit_error(shopify):
    use_responses(shopify, FakeResponse(status_code=429, reason="Too Many Requests", text="slow down"))
    with pytest.raises(ShopifyRateLimitError):
        shopify.get_shop()


def test_validation_errors_are_flattened(shopify):
    use_responses(shopify, FakeResponse(
        status_code=422, reason="Unprocessable Entity",
        payload={"errors": {"asset": ["is invalid"]}}
    ))
    with pytest.raises(ShopifyClientError) as exc_info:
        shopify.get_shop()
    assert exc_info.value.status_code == 422
    assert "asset" in exc_info.value.message


def test_network_error_has_no_status(shopify):
    use_responses(shopify, requests.exceptions.ConnectionError("connection refused"))
    with pytest.raises(ShopifyClientError) as exc_info:
        shopify.validate_connection()
    assert exc_info.value.status_code is None


def test_get_blog_id(shopify):
    session = use_responses(shopify, FakeResponse(payload={"blogs": [{"id": 241253187, "title": "News"}]}))
    assert shopify.get_blog_id() == "241253187"
    assert session.calls[0][1].endswith("/blogs.json")


def test_get_blog_id_without_blogs(shopify):
    use_responses(shopify, FakeResponse(payload={"blogs": []}))
    with pytest.raises(ShopifyClientError, match="No blogs"):
        shopify.get_blog_id()


def test_get_products_passes_limit(shopify):
    session = use_responses(shopify, FakeResponse(payload={"products": [{"id": 1}, {"id": 2}]}))
    assert shopify.get_products(2) == [{"id": 1}, {"id": 2}]
    assert session.calls[0][2]["params"] == {"limit": 2}
