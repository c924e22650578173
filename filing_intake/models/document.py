from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from enum import Enum


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class UploadedDocument(CamelModel):
    filename: str = Field(..., description="Original client filename")
    url_or_path: str = Field(..., description="Storage reference returned by the upload store")
    size: int = Field(..., ge=0, description="Size in bytes")
    content_type: str = Field(..., description="Declared MIME type")

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

class ExtractedAmount(CamelModel):
    label: str
    value: float
    description: Optional[str] = None

class ExtractedData(CamelModel):
    year: Optional[str] = None
    amounts: Optional[List[ExtractedAmount]] = None
    employer: Optional[str] = None
    payer: Optional[str] = None
    recipient: Optional[str] = None

class DocumentAnalysis(CamelModel):
    document_type: Optional[str] = Field(None, description="W-2, 1099-NEC, Schedule C, ... or None if unknown")
    confidence: Confidence = Field(Confidence.MEDIUM, validate_default=True)
    extracted_data: ExtractedData = Field(default_factory=ExtractedData)
    summary: str = ""
    notes: List[str] = Field(default_factory=list)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True

class AnalysisResult(CamelModel):
    filename: str
    analysis: Optional[DocumentAnalysis] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _require_analysis_or_error(self):
        if self.analysis is None and not self.error:
            raise ValueError("AnalysisResult needs either an analysis or an error")
        return self

    @property
    def succeeded(self) -> bool:
        return self.analysis is not None

class Strategy(CamelModel):
    title: str
    description: str
    potential_savings: Optional[str] = None
