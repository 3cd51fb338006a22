from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from enum import Enum


class UploadState(str, Enum):
    UPLOADED = "uploaded"
    INVALID = "invalid"
    REMOTE_FAILED = "remote_failed"


class UploadOutcome(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    keyword: Optional[str] = None
    error: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool
    reason: Optional[str] = None

    @classmethod
    def passed(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failed(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason)


class IngestionResult(BaseModel):
    state: UploadState
    outcome: UploadOutcome


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class ProductsResponse(BaseModel):
    success: bool = True
    products: List[Dict[str, Any]] = []
    count: int = 0


class ConnectionValidation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    is_connected: bool = Field(alias="isConnected")
    message: Optional[str] = None
    blog_id: Optional[str] = Field(default=None, alias="blogId")
    error: Optional[str] = None
    details: Optional[str] = None
    suggestion: Optional[str] = None


class DiagnosticStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


class EnvironmentReport(BaseModel):
    shop: str
    access_token: str
    api_version: str
    blog_id: str
    shop_configured: bool = False
    access_token_configured: bool = False


class ConnectionReport(BaseModel):
    status: str
    connected: bool = False
    shop_name: Optional[str] = None
    url: Optional[str] = None
    response_status: Optional[int] = None
    response_status_text: Optional[str] = None
    error: Optional[str] = None


class ShopifyDiagnostics(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: DiagnosticStatus = DiagnosticStatus.OK
    issues: List[str] = []
    environment: EnvironmentReport
    connection: Optional[ConnectionReport] = None


class ParseDocumentRequest(BaseModel):
    document: Optional[str] = None


class DocumentSection(BaseModel):
    heading: Optional[str] = None
    level: int = 0
    content: str = ""
    word_count: int = 0


class ParsedDocument(BaseModel):
    sections: List[DocumentSection] = []
