from .document import (
    UploadedDocument,
    DocumentAnalysis,
    ExtractedData,
    ExtractedAmount,
    Confidence,
    AnalysisResult,
    Strategy,
)
from .submission import ContactInfo, FilingInfo, FilingType, IncomeInfo, IntakeSubmission, SubmittedDocument
from .responses import AnalyzeResponse, IntakeResponse, ErrorResponse

__all__ = [
    "UploadedDocument",
    "DocumentAnalysis",
    "ExtractedData",
    "ExtractedAmount",
    "Confidence",
    "AnalysisResult",
    "Strategy",
    "ContactInfo",
    "FilingInfo",
    "FilingType",
    "IncomeInfo",
    "IntakeSubmission",
    "SubmittedDocument",
    "AnalyzeResponse",
    "IntakeResponse",
    "ErrorResponse"
]
