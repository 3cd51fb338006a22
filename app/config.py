import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    # API Configuration
    API_TITLE = "Shopify Content Backend"
    API_VERSION = "1.0.0"
    API_DESCRIPTION = "Proxies product, blog and image endpoints to the Shopify Admin API"

    # Server Configuration
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 8000))
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Shopify Admin API
    SHOPIFY_SHOP = os.getenv("SHOPIFY_SHOP", "")
    SHOPIFY_ADMIN_ACCESS_TOKEN = os.getenv("SHOPIFY_ADMIN_ACCESS_TOKEN", "")
    SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2025-01")
    BLOG_ID = os.getenv("BLOG_ID", "")

    # Request Configuration
    REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", 30))
    MAX_RETRIES = int(os.getenv("MAX_RETRIES", 3))
    RETRY_BACKOFF = float(os.getenv("RETRY_BACKOFF", 1.0))

    # Upload Limits
    MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
    ALLOWED_IMAGE_TYPES = os.getenv(
        "ALLOWED_IMAGE_TYPES", "image/jpeg,image/png,image/webp,image/gif"
    ).split(",")
    DEFAULT_KEYWORD = "image"

    # Product listing
    DEFAULT_PRODUCT_LIMIT = int(os.getenv("DEFAULT_PRODUCT_LIMIT", 250))
    MAX_PRODUCT_LIMIT = int(os.getenv("MAX_PRODUCT_LIMIT", 250))

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Security Configuration
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


# Create settings instance
settings = Settings()
