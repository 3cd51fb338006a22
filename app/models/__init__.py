"""
Data models and schemas for the Shopify content backend
"""

from .schemas import (
    UploadState,
    UploadOutcome,
    ValidationResult,
    IngestionResult,
    ErrorResponse,
    ProductsResponse,
    ConnectionValidation,
    DiagnosticStatus,
    EnvironmentReport,
    ConnectionReport,
    ShopifyDiagnostics,
    ParseDocumentRequest,
    DocumentSection,
    ParsedDocument
)

__all__ = [
    "UploadState",
    "UploadOutcome",
    "ValidationResult",
    "IngestionResult",
    "ErrorResponse",
    "ProductsResponse",
    "ConnectionValidation",
    "DiagnosticStatus",
    "EnvironmentReport",
    "ConnectionReport",
    "ShopifyDiagnostics",
    "ParseDocumentRequest",
    "DocumentSection",
    "ParsedDocument"
]
