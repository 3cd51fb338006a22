import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.models.schemas import (
    ErrorResponse, ParseDocumentRequest, ProductsResponse, UploadOutcome, UploadState
)
from app.services.document_parser import DocumentParseError, parse_document
from app.services.image_ingestion import ImageIngestionPipeline
from app.services.multipart_stream import IngestionError
from app.services.shopify_client import ShopifyClient, ShopifyClientError, get_shopify_client
from app.services.shopify_diagnostics import diagnose_shopify, validate_shopify_connection
from app.utils.helpers import normalize_limit

logger = logging.getLogger(__name__)
router = APIRouter()

UPLOAD_STATUS = {
    UploadState.UPLOADED: status.HTTP_200_OK,
    UploadState.INVALID: status.HTTP_400_BAD_REQUEST,
    UploadState.REMOTE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# Dependency injection for services
def get_ingestion_pipeline(
        client: ShopifyClient = Depends(get_shopify_client)
) -> ImageIngestionPipeline:
    return ImageIngestionPipeline(store=client)


def _outcome_response(status_code: int, outcome: UploadOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=outcome.model_dump(by_alias=True, exclude_none=True)
    )


@router.post("/upload-image")
async def upload_image(
        request: Request,
        pipeline: ImageIngestionPipeline = Depends(get_ingestion_pipeline)
):
    """
    Upload one image to Shopify

    **Body:** multipart/form-data with one file part and an optional
    `keyword` text field.

    **Returns:**
    - 200 `{success, imageUrl, keyword}`
    - 400 no file, unsupported type or file larger than 5MB
    - 500 broken upload stream or Shopify failure
    """
    content_type = request.headers.get("content-type", "")
    logger.info(f"POST /api/upload-image - Content-Type: {content_type}")

    try:
        result = await pipeline.ingest(content_type, request.stream())
    except IngestionError as e:
        logger.error(f"Image upload stream error: {e}")
        return _outcome_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            UploadOutcome(success=False, error=str(e))
        )
    except Exception as e:
        logger.exception(f"Image upload error: {e}")
        return _outcome_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            UploadOutcome(success=False, error=str(e) or "Unexpected server error")
        )

    return _outcome_response(UPLOAD_STATUS[result.state], result.outcome)


@router.get("/products")
def get_products(
        limit: Optional[str] = None,
        client: ShopifyClient = Depends(get_shopify_client)
):
    """
    List products from the Shopify Admin API

    **Parameters:**
    - limit: Maximum number of products (default and maximum: 250)
    """
    page_size = normalize_limit(limit, settings.DEFAULT_PRODUCT_LIMIT, settings.MAX_PRODUCT_LIMIT)
    logger.info(f"Fetching products with limit: {page_size}")

    try:
        products = client.get_products(page_size)
    except ShopifyClientError as e:
        logger.error(f"Error fetching products: {e}")
        status_code = e.status_code if e.status_code == status.HTTP_401_UNAUTHORIZED \
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        return JSONResponse(
            status_code=status_code,
            content={"success": False, **ErrorResponse(error="Failed to fetch products", details=str(e)).model_dump()}
        )
    except Exception as e:
        logger.exception(f"Unexpected error fetching products: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, **ErrorResponse(error="Failed to fetch products", details=str(e)).model_dump()}
        )

    logger.info(f"Successfully fetched {len(products)} products")
    return ProductsResponse(success=True, products=products, count=len(products))


@router.get("/validate-shopify")
def validate_shopify(client: ShopifyClient = Depends(get_shopify_client)):
    """
    Check that the configured credentials reach Shopify and a blog is available
    """
    logger.info("GET /api/validate-shopify request received")
    logger.info(f"SHOPIFY_SHOP: {'SET' if settings.SHOPIFY_SHOP else 'NOT SET'}")
    logger.info(f"SHOPIFY_API_VERSION: {settings.SHOPIFY_API_VERSION}")

    try:
        status_code, result = validate_shopify_connection(client, blog_id_fallback=settings.BLOG_ID or None)
    except Exception as e:
        logger.exception(f"Error validating Shopify: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "isConnected": False,
                "error": "Failed to validate Shopify connection",
                "details": str(e),
            }
        )

    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(by_alias=True, exclude_none=True)
    )


@router.get("/diagnose-shopify")
def diagnose():
    """
    Report Shopify configuration, connectivity and any issues found
    """
    try:
        diagnostics = diagnose_shopify(settings)
    except Exception as e:
        logger.exception(f"Diagnostics failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    return JSONResponse(content=diagnostics.model_dump(mode="json"))


@router.post("/parse-document")
async def parse_document_endpoint(request: Request):
    """
    Split a Markdown or HTML document into sections

    **Body:** `{"document": "<text>"}`
    """
    try:
        payload = ParseDocumentRequest.model_validate(await request.json())
    except ValueError as e:
        # invalid JSON or a non-string document
        logger.warning(f"Unreadable parse-document body: {e}")
        payload = None

    document = payload.document if payload else None
    logger.info(f"POST /api/parse-document - Document length: {len(document or '')} characters")

    if not document:
        logger.error("Missing document field")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error="Missing 'document' field in request body",
                details="Document must be a non-empty string"
            ).model_dump()
        )

    try:
        parsed = parse_document(document)
    except DocumentParseError as e:
        logger.error(f"Error parsing document: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="Failed to parse document", details=str(e)).model_dump()
        )
    except Exception as e:
        logger.exception(f"Unexpected error in parse-document: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="Failed to parse document", details=str(e)).model_dump()
        )

    logger.info(f"Document parsed successfully. Sections: {len(parsed.sections)}")
    return {"success": True, "data": parsed.model_dump()}


@router.get("/health")
async def health_check():
    """Health check for the API routes"""
    return {
        "status": "healthy",
        "service": "Shopify Content API",
        "endpoints_available": [
            "/upload-image",
            "/products",
            "/validate-shopify",
            "/diagnose-shopify",
            "/parse-document",
            "/health"
        ]
    }
