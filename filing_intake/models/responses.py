from typing import List, Optional

from .document import CamelModel, AnalysisResult, Strategy

class AnalyzeResponse(CamelModel):
    success: bool = True
    results: List[AnalysisResult]
    strategies: List[Strategy]
    summary: str

class IntakeResponse(CamelModel):
    success: bool = True
    message: str
    submission_id: Optional[str] = None

class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    code: Optional[str] = None
