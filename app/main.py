from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager

from app.config import settings
from app.models.schemas import ErrorResponse
from app.api.routes import router
from app.services.shopify_client import get_shopify_client

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    if not (settings.SHOPIFY_SHOP and settings.SHOPIFY_ADMIN_ACCESS_TOKEN):
        logger.warning("SHOPIFY_SHOP or SHOPIFY_ADMIN_ACCESS_TOKEN is not set; Shopify calls will fail")

    yield

    if get_shopify_client.cache_info().currsize:
        get_shopify_client().close()
    logger.info("Application shutting down...")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes with prefix
app.include_router(router, prefix="/api", tags=["Shopify Content"])


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Shopify Content Backend API",
        "version": settings.API_VERSION,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "endpoints": {
            "upload_image": "/api/upload-image",
            "products": "/api/products",
            "validate_shopify": "/api/validate-shopify",
            "diagnose_shopify": "/api/diagnose-shopify",
            "parse_document": "/api/parse-document",
            "health": "/api/health"
        },
        "status": "active"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "version": settings.API_VERSION,
        "service": settings.API_TITLE,
        "shopify_configured": bool(settings.SHOPIFY_SHOP and settings.SHOPIFY_ADMIN_ACCESS_TOKEN)
    }


# Global exception handlers
@app.exception_handler(404)
async def not_found_handler(request, exc):
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(
            error="Not Found",
            details="The requested resource was not found"
        ).model_dump()
    )


@app.exception_handler(405)
async def method_not_allowed_handler(request, exc):
    allow = (getattr(exc, "headers", None) or {}).get("Allow", "")
    methods = sorted(m.strip() for m in allow.split(",") if m.strip() and m.strip() != "HEAD")
    logger.warning(f"Invalid method: {request.method} {request.url.path}")
    return JSONResponse(
        status_code=405,
        content=ErrorResponse(
            error="Method Not Allowed",
            details=f"Only {' and '.join(methods)} requests are supported" if methods
            else "This method is not supported for the requested resource"
        ).model_dump(),
        headers={"Allow": allow} if allow else None
    )


@app.exception_handler(500)
async def internal_server_error_handler(request, exc):
    logger.error(f"Internal server error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            **ErrorResponse(
                error="Internal Server Error",
                details=str(exc) or "An internal server error occurred"
            ).model_dump()
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
