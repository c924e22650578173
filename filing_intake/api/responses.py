from typing import Optional

from fastapi.responses import JSONResponse

from filing_intake.models.responses import ErrorResponse
from filing_intake.utils.exceptions import ErrorCode

def error_response(message: str, status_code: int = 500,
                   code: Optional[ErrorCode] = None) -> JSONResponse:
    """Build the standard {success: false, error, code} error body"""
    body = ErrorResponse(error=message, code=code.value if code else None)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True)
    )
