# app/models/extract_models.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

BASIC_TEXT_EXTRACTION = "basic_text_extraction"


class ExtractMeta(BaseModel):
    filename: str
    size_bytes: int
    sha256: str


class ExtractionResult(BaseModel):
    success: bool = True
    text: str
    page_count: int = Field(..., ge=1)
    method: str = BASIC_TEXT_EXTRACTION


# --- failures ---
class FailureReason(str, Enum):
    no_file_provided = "NoFileProvided"
    no_text_found    = "NoTextFound"
    internal_error   = "InternalError"

class ExtractionFailure(BaseModel):
    reason: FailureReason
    message: str
    details: Optional[str] = None


# --- response bodies (shape is fixed; the upload UI reads these keys) ---
class ExtractInfo(BaseModel):
    extracted: bool = True
    method: str = BASIC_TEXT_EXTRACTION

class ExtractResponse(BaseModel):
    success: bool = True
    text: str
    pages: int
    info: ExtractInfo = Field(default_factory=ExtractInfo)

    @classmethod
    def from_result(cls, result: ExtractionResult) -> "ExtractResponse":
        return cls(
            success=result.success,
            text=result.text,
            pages=result.page_count,
            info=ExtractInfo(method=result.method),
        )

class MissingFileBody(BaseModel):
    error: str

class NoTextBody(BaseModel):
    error: str
    success: bool = False

class InternalErrorBody(BaseModel):
    error: str
    details: str
