import logging
from typing import AsyncIterator, Callable, Iterable, Optional

from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.models.schemas import IngestionResult, UploadOutcome, UploadState, ValidationResult
from app.services.multipart_stream import (
    MultipartStreamReader, ParsedForm, ParsedPart, parse_multipart_content_type
)
from app.services.shopify_client import ShopifyClientError
from app.utils.helpers import current_millis, derive_upload_filename

logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "No file provided. Please upload an image file."
INVALID_TYPE_MESSAGE = "Invalid file type. Only JPEG, PNG, WebP, and GIF images are allowed."
TOO_LARGE_MESSAGE = "File too large. Maximum size is 5MB."
UPLOAD_FAILED_MESSAGE = "Failed to upload image to Shopify"


def validate_part(
        part: Optional[ParsedPart],
        allowed_mime_types: Iterable[str],
        max_bytes: int
) -> ValidationResult:
    """
    Check a received file part against the upload policy

    Checks run in a fixed order (missing file, MIME type, size) and the
    first failure wins. Only the declared MIME type is considered.

    Args:
        part: The file part, or None when the request had none
        allowed_mime_types: Accepted declared MIME types
        max_bytes: Largest accepted size in bytes (inclusive)

    Returns:
        ValidationResult with the failure reason, if any
    """
    if part is None:
        return ValidationResult.failed(NO_FILE_MESSAGE)

    if part.mime_type not in allowed_mime_types:
        return ValidationResult.failed(INVALID_TYPE_MESSAGE)

    if part.size > max_bytes:
        return ValidationResult.failed(TOO_LARGE_MESSAGE)

    return ValidationResult.passed()


class ImageIngestionPipeline:
    """Turns one multipart upload into a stored image URL

    ``store`` is any object with ``upload_image(data, filename, alt_text) -> url``
    that raises ShopifyClientError on failure.
    """

    def __init__(
            self,
            store,
            max_bytes: int = settings.MAX_UPLOAD_BYTES,
            allowed_mime_types: Optional[Iterable[str]] = None,
            clock: Callable[[], int] = current_millis,
            default_keyword: str = settings.DEFAULT_KEYWORD
    ):
        self.store = store
        self.max_bytes = max_bytes
        self.allowed_mime_types = frozenset(allowed_mime_types or settings.ALLOWED_IMAGE_TYPES)
        self.clock = clock
        self.default_keyword = default_keyword

    async def receive(self, content_type: Optional[str], body: AsyncIterator[bytes]) -> ParsedForm:
        """Read the request body; raises IngestionError if the stream fails"""
        parsed = parse_multipart_content_type(content_type)
        if parsed is None:
            # not multipart/form-data, so there is no file part to find
            logger.warning(f"Upload request with unsupported Content-Type: {content_type}")
            return ParsedForm(keyword=self.default_keyword)

        boundary, charset = parsed
        reader = MultipartStreamReader(
            boundary,
            charset=charset,
            max_file_bytes=self.max_bytes,
            default_keyword=self.default_keyword
        )
        return await reader.consume(body)

    async def ingest(self, content_type: Optional[str], body: AsyncIterator[bytes]) -> IngestionResult:
        """
        Receive, validate, name and upload one image

        Args:
            content_type: Content-Type header of the request
            body: Async iterator over the raw request body

        Returns:
            IngestionResult whose state is UPLOADED, INVALID or REMOTE_FAILED

        Raises:
            IngestionError: when the body stream fails before completing
        """
        form = await self.receive(content_type, body)

        validation = validate_part(form.file, self.allowed_mime_types, self.max_bytes)
        if not validation.valid:
            if form.file is not None:
                logger.error(f"Rejected upload {form.file.filename} ({form.file.mime_type}, "
                             f"{form.file.size} bytes): {validation.reason}")
            else:
                logger.error("No file provided")
            return IngestionResult(
                state=UploadState.INVALID,
                outcome=UploadOutcome(success=False, error=validation.reason)
            )

        upload_filename = derive_upload_filename(form.keyword, form.file.filename, self.clock())
        logger.info(f"Uploading to Shopify: {upload_filename}")

        try:
            image_url = await run_in_threadpool(
                self.store.upload_image, bytes(form.file.data), upload_filename, form.keyword
            )
        except ShopifyClientError as e:
            logger.error(f"Shopify upload error: {e}")
            return IngestionResult(
                state=UploadState.REMOTE_FAILED,
                outcome=UploadOutcome(success=False, error=str(e) or UPLOAD_FAILED_MESSAGE)
            )

        logger.info(f"Successfully uploaded image. URL: {image_url}")
        return IngestionResult(
            state=UploadState.UPLOADED,
            outcome=UploadOutcome(success=True, image_url=image_url, keyword=form.keyword)
        )
