import logging
from typing import List, Optional, Tuple

import requests

from app.config import settings
from app.models.schemas import (
    ConnectionReport, ConnectionValidation, DiagnosticStatus,
    EnvironmentReport, ShopifyDiagnostics
)
from app.services.shopify_client import (
    ShopifyClientError, ShopifyNotConfiguredError, normalize_shop_domain
)
from app.utils.helpers import describe_secret, describe_setting

logger = logging.getLogger(__name__)

CREDENTIALS_SUGGESTION = (
    "Please verify that SHOPIFY_SHOP and SHOPIFY_ADMIN_ACCESS_TOKEN are correctly set "
    "and that your Shopify API access token is still valid."
)
NOT_CONFIGURED_SUGGESTION = "Please set SHOPIFY_SHOP and SHOPIFY_ADMIN_ACCESS_TOKEN environment variables."
NO_BLOG_SUGGESTION = (
    "Please ensure your Shopify store has at least one blog and that your access token has blog "
    "permissions. Alternatively, you can set the BLOG_ID environment variable directly."
)
MIN_TOKEN_LENGTH = 20


def _not_configured() -> Tuple[int, ConnectionValidation]:
    return 503, ConnectionValidation(
        success=False,
        is_connected=False,
        error="Shopify is not configured",
        details="Missing Shopify credentials",
        suggestion=NOT_CONFIGURED_SUGGESTION
    )


def validate_shopify_connection(client, blog_id_fallback: Optional[str] = None) -> Tuple[int, ConnectionValidation]:
    """
    Check credentials and blog access

    Args:
        client: Shopify client exposing validate_connection() and get_blog_id()
        blog_id_fallback: Blog id to report when the shop has no readable blog

    Returns:
        (HTTP status, ConnectionValidation)
    """
    logger.info("Attempting to validate Shopify connection...")
    connection_error: Optional[ShopifyClientError] = None
    try:
        is_connected = client.validate_connection()
    except ShopifyNotConfiguredError:
        logger.error("Shopify credentials are not configured")
        return _not_configured()
    except ShopifyClientError as e:
        is_connected = False
        connection_error = e
        logger.error(f"Connection validation threw error: {e}")

    if not is_connected:
        details = str(connection_error) if connection_error else "Shopify credentials are not properly configured."
        logger.error(f"Shopify connection failed. Details: {details}")
        return 503, ConnectionValidation(
            success=False,
            is_connected=False,
            error="Cannot connect to Shopify",
            details=details,
            suggestion=CREDENTIALS_SUGGESTION
        )

    try:
        blog_id = client.get_blog_id()
    except ShopifyClientError as e:
        logger.error(f"Error getting blog ID: {e}")
        if blog_id_fallback:
            logger.info(f"Using BLOG_ID from environment: {blog_id_fallback}")
            return 200, ConnectionValidation(
                success=True,
                is_connected=True,
                message="Shopify is properly configured (using BLOG_ID from environment)",
                blog_id=blog_id_fallback
            )
        return 400, ConnectionValidation(
            success=False,
            is_connected=True,
            error="Shopify is connected but no blog found",
            details=str(e) or "Cannot retrieve blog information",
            suggestion=NO_BLOG_SUGGESTION
        )

    logger.info(f"Successfully validated Shopify connection. Blog ID: {blog_id}")
    return 200, ConnectionValidation(
        success=True,
        is_connected=True,
        message="Shopify is properly configured",
        blog_id=blog_id
    )


def _status_issue(response: requests.Response, shop: str) -> str:
    status_code = response.status_code
    if status_code == 401:
        return "HTTP 401: Access token is invalid or expired. Please regenerate your Shopify API token."
    if status_code == 404:
        return f'HTTP 404: Shop not found. Please verify that SHOPIFY_SHOP="{shop}" is correct.'
    if status_code == 429:
        return "HTTP 429: Rate limited by Shopify. Please try again later."
    if status_code >= 500:
        return f"HTTP {status_code}: Shopify server error. Please try again later."
    return f"HTTP {status_code}: {response.reason}"


def probe_shop(shop: str, access_token: str, api_version: str, timeout: int = 10) -> Tuple[ConnectionReport, List[str]]:
    """
    Call shop.json once, without retries, and describe the result

    Returns:
        (ConnectionReport, issues found)
    """
    url = f"https://{normalize_shop_domain(shop)}/admin/api/{api_version}/shop.json"
    logger.info(f"[Diagnose] Attempting connection to {url}")

    try:
        response = requests.get(url, headers={"X-Shopify-Access-Token": access_token}, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"[Diagnose] Network/fetch error: {e}")
        return ConnectionReport(status="✗ Connection Error", error=str(e)), [f"Network error: {e}"]

    logger.info(f"[Diagnose] Response status: {response.status_code}")

    if not response.ok:
        logger.error(f"[Diagnose] Connection failed. Status: {response.status_code}, Body: {response.text[:200]}")
        report = ConnectionReport(
            status="✗ Connection Failed",
            url=url,
            response_status=response.status_code,
            response_status_text=response.reason
        )
        return report, [_status_issue(response, shop)]

    try:
        shop_name = (response.json().get("shop") or {}).get("name")
    except ValueError:
        shop_name = None

    logger.info(f"[Diagnose] Successfully connected to shop: {shop_name}")
    report = ConnectionReport(
        status="✓ Connected",
        connected=True,
        shop_name=shop_name,
        url=url,
        response_status=response.status_code
    )
    return report, []


def diagnose_shopify(config=settings) -> ShopifyDiagnostics:
    """Report configuration completeness, connectivity and collected issues"""
    shop = config.SHOPIFY_SHOP
    access_token = config.SHOPIFY_ADMIN_ACCESS_TOKEN
    api_version = config.SHOPIFY_API_VERSION or "2025-01"
    blog_id = config.BLOG_ID

    environment = EnvironmentReport(
        shop=describe_setting(shop),
        access_token=describe_secret(access_token),
        api_version=api_version,
        blog_id=describe_setting(blog_id, missing="Not set (will be fetched)"),
        shop_configured=bool(shop),
        access_token_configured=bool(access_token)
    )

    issues: List[str] = []
    if not shop:
        issues.append("SHOPIFY_SHOP environment variable is not set")
    elif "myshopify.com" not in shop:
        issues.append(f'SHOPIFY_SHOP format may be incorrect: "{shop}". Expected format: "myshop.myshopify.com"')

    if not access_token:
        issues.append("SHOPIFY_ADMIN_ACCESS_TOKEN environment variable is not set")
    elif len(access_token) < MIN_TOKEN_LENGTH:
        issues.append(f"SHOPIFY_ADMIN_ACCESS_TOKEN seems too short ({len(access_token)} chars). "
                      f"Access tokens are typically longer.")

    connection = None
    if shop and access_token:
        connection, connection_issues = probe_shop(shop, access_token, api_version, timeout=config.REQUEST_TIMEOUT)
        issues.extend(connection_issues)

    status = DiagnosticStatus.ERROR if issues or not (shop and access_token) else DiagnosticStatus.OK

    return ShopifyDiagnostics(
        status=status,
        issues=issues,
        environment=environment,
        connection=connection
    )
