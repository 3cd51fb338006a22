"""
Business logic services: Shopify access, image ingestion and document parsing
"""

from .shopify_client import ShopifyClient, ShopifyClientError, get_shopify_client
from .image_ingestion import ImageIngestionPipeline
from .multipart_stream import IngestionError
from .document_parser import DocumentParseError, parse_document

__all__ = [
    "ShopifyClient",
    "ShopifyClientError",
    "get_shopify_client",
    "ImageIngestionPipeline",
    "IngestionError",
    "DocumentParseError",
    "parse_document"
]
