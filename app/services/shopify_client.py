import base64
import logging
from functools import lru_cache
from typing import Optional, Dict, Any, List

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from app.config import settings

logger = logging.getLogger(__name__)


class ShopifyClientError(Exception):
    """Base error for Shopify Admin API failures

    ``status_code`` is the HTTP status returned by Shopify, or None when
    no response was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ShopifyAuthError(ShopifyClientError):
    """Access token rejected (401/403)"""


class ShopifyRateLimitError(ShopifyClientError):
    """Still rate limited after retries (429)"""


class ShopifyNotConfiguredError(ShopifyClientError):
    """Shop domain or access token missing"""


def normalize_shop_domain(shop: str) -> str:
    """Strip protocol and trailing slashes from a shop domain"""
    shop = (shop or "").strip()
    for prefix in ("https://", "http://"):
        if shop.startswith(prefix):
            shop = shop[len(prefix):]
    return shop.rstrip("/")


class ShopifyClient:
    """Client for the Shopify Admin REST API

    Retries on 429 and 5xx are handled by the session's HTTPAdapter; every
    other failure surfaces as a ShopifyClientError.
    """

    def __init__(
            self,
            shop: str,
            access_token: str,
            api_version: str = "2025-01",
            timeout: int = 30,
            max_retries: int = 3,
            backoff_factor: float = 1.0
    ):
        self.shop = normalize_shop_domain(shop)
        self.api_version = api_version
        self.timeout = timeout
        self.base_url = f"https://{self.shop}/admin/api/{api_version}"
        self.session = self._create_session(max_retries, backoff_factor)
        self.session.headers.update({
            "X-Shopify-Access-Token": access_token or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        self._configured = bool(self.shop and access_token)

    @classmethod
    def from_settings(cls, config=settings) -> "ShopifyClient":
        return cls(
            shop=config.SHOPIFY_SHOP,
            access_token=config.SHOPIFY_ADMIN_ACCESS_TOKEN,
            api_version=config.SHOPIFY_API_VERSION,
            timeout=config.REQUEST_TIMEOUT,
            max_retries=config.MAX_RETRIES,
            backoff_factor=config.RETRY_BACKOFF,
        )

    def _create_session(self, max_retries: int, backoff_factor: float) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    @property
    def is_configured(self) -> bool:
        return self._configured

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Send one Admin API request and return the decoded JSON body"""
        if not self._configured:
            raise ShopifyNotConfiguredError(
                "Shopify is not configured: SHOPIFY_SHOP and SHOPIFY_ADMIN_ACCESS_TOKEN must be set"
            )

        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error calling Shopify {method} {url}: {e}")
            raise ShopifyClientError(f"Network error calling Shopify: {e}") from e

        if not response.ok:
            message = f"Shopify API error ({response.status_code} {response.reason}): {self._error_detail(response)}"
            logger.error(f"{method} {url} failed: {message}")
            if response.status_code in (401, 403):
                raise ShopifyAuthError(message, response.status_code)
            if response.status_code == 429:
                raise ShopifyRateLimitError(message, response.status_code)
            raise ShopifyClientError(message, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ShopifyClientError(
                f"Invalid JSON returned by Shopify for {path}", response.status_code
            ) from e

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return (response.text or "").strip()[:200] or "no details"

        errors = body.get("errors") if isinstance(body, dict) else None
        if isinstance(errors, dict):
            return "; ".join(f"{key}: {value}" for key, value in errors.items())
        if errors:
            return str(errors)
        return str(body)[:200]

    def get_shop(self) -> Dict[str, Any]:
        data = self._request("GET", "shop.json")
        return data.get("shop") or {}

    def validate_connection(self) -> bool:
        """Return True when the shop endpoint answers with the configured token"""
        shop = self.get_shop()
        logger.info(f"Connected to Shopify shop: {shop.get('name', self.shop)}")
        return True

    def get_blog_id(self) -> str:
        data = self._request("GET", "blogs.json", params={"limit": 1, "fields": "id,title"})
        blogs = data.get("blogs") or []
        if not blogs:
            raise ShopifyClientError("No blogs found in the Shopify store")
        return str(blogs[0]["id"])

    def get_products(self, limit: int = 250) -> List[Dict[str, Any]]:
        data = self._request("GET", "products.json", params={"limit": limit})
        return data.get("products") or []

    def get_main_theme_id(self) -> str:
        data = self._request("GET", "themes.json", params={"role": "main"})
        themes = data.get("themes") or []
        if not themes:
            raise ShopifyClientError("No published theme found to store images in")
        return str(themes[0]["id"])

    def upload_image(self, data: bytes, filename: str, alt_text: str) -> str:
        """
        Upload an image as an asset of the published theme

        Args:
            data: Image bytes
            filename: Destination file name
            alt_text: Descriptive text for the image (the Asset API has no alt field)

        Returns:
            str: Public CDN URL of the stored image
        """
        theme_id = self.get_main_theme_id()
        logger.info(f"Uploading {filename} ({len(data)} bytes, alt='{alt_text}') to theme {theme_id}")

        payload = {
            "asset": {
                "key": f"assets/{filename}",
                "attachment": base64.b64encode(data).decode("ascii"),
            }
        }
        response = self._request("PUT", f"themes/{theme_id}/assets.json", json=payload)
        asset = response.get("asset") or {}
        public_url = asset.get("public_url")
        if not public_url:
            raise ShopifyClientError("Shopify did not return a public URL for the uploaded image")
        return public_url

    def close(self):
        """Close the session"""
        if self.session:
            self.session.close()


@lru_cache(maxsize=1)
def get_shopify_client() -> ShopifyClient:
    """Process-wide client built once from settings"""
    client = ShopifyClient.from_settings(settings)
    logger.info(f"Shopify client initialized for {client.shop or '<unset shop>'} (API {client.api_version})")
    return client
