from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response
from pathlib import Path
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from filing_intake.config import Settings
from filing_intake.models.responses import AnalyzeResponse, IntakeResponse, ErrorResponse
from filing_intake.models.submission import (
    ContactInfo,
    FilingInfo,
    IncomeInfo,
    IntakeSubmission,
    SubmittedDocument,
)
from filing_intake.services.document_analyzer import summarize_results
from filing_intake.services.intake_pipeline import IncomingFile, IntakePipeline
from filing_intake.services.submission_store import SubmissionStore
from filing_intake.services.upload_store import UploadStore
from filing_intake.api.dependencies import (
    get_intake_pipeline,
    get_settings,
    get_submission_store,
    get_upload_store,
)
from filing_intake.api.responses import error_response
from filing_intake.utils.logger import get_logger
from filing_intake.utils.exceptions import ErrorCode, StorageError, ValidationError
from filing_intake.utils.validators import (
    sanitize_filename,
    validate_content_type,
    validate_file_count,
    validate_file_size,
)

logger = get_logger(__name__)
router = APIRouter()

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}

DOWNLOAD_CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".txt": "text/plain",
}

SectionModel = TypeVar("SectionModel", bound=BaseModel)


async def _read_uploads(files: List[UploadFile], require_files: bool = True) -> List[IncomingFile]:
    """Read and validate multipart uploads before anything is stored"""
    if require_files or files:
        validate_file_count(len(files))

    incoming = []
    for upload in files:
        filename = upload.filename or "file"
        content = await upload.read()
        content_type = upload.content_type or "application/octet-stream"
        validate_file_size(len(content), filename)
        validate_content_type(content_type, filename)
        incoming.append(IncomingFile(filename=filename, content=content, content_type=content_type))
    return incoming


def _parse_section(raw: Optional[str], model: Type[SectionModel], label: str) -> SectionModel:
    if not raw:
        raise ValidationError(f"{label} information is required")
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError as e:
        logger.error(f"Failed to parse {label.lower()} info: {str(e)}")
        raise ValidationError(f"Invalid {label.lower()} information format") from e


@router.post("/analyze", response_model=AnalyzeResponse, responses=ERROR_RESPONSES)
async def analyze_documents(
    files: Optional[List[UploadFile]] = File(None),
    pipeline: IntakePipeline = Depends(get_intake_pipeline)
):
    """
    Store the submitted documents, analyze each one with AI and derive strategy insights
    - 400 when no files are sent or a file fails validation
    - 500 when storage fails; nothing is analyzed in that case
    - Individual analysis failures are reported per document in `results`
    """
    try:
        incoming = await _read_uploads(files or [])
        logger.info(f"Analyze request with {len(incoming)} file(s)")

        outcome = await pipeline.run(incoming)

        return AnalyzeResponse(
            results=outcome.results,
            strategies=outcome.strategies,
            summary=summarize_results(outcome.results)
        )

    except ValidationError as e:
        logger.warning(f"Rejected analyze request: {str(e)}")
        return error_response(str(e), 400, e.code)
    except StorageError as e:
        logger.error(f"Storage error during analyze: {str(e)}")
        return error_response(str(e), 500, e.code)
    except Exception as e:
        logger.exception(f"Unexpected error during analyze: {str(e)}")
        return error_response("Internal server error", 500, ErrorCode.SERVER_ERROR)


@router.post("/intake", response_model=IntakeResponse, responses=ERROR_RESPONSES)
async def submit_intake(
    contact_info: Optional[str] = Form(None, alias="contactInfo"),
    filing_info: Optional[str] = Form(None, alias="filingInfo"),
    income_info: Optional[str] = Form(None, alias="incomeInfo"),
    files: Optional[List[UploadFile]] = File(None),
    account_id: Optional[str] = Query(None),
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
    submission_store: SubmissionStore = Depends(get_submission_store),
    config: Settings = Depends(get_settings)
):
    """
    Full client intake: contact, filing and income details plus documents
    - Documents are stored first; a storage failure rejects the submission
    - AI analysis runs only when ENABLE_AI_ANALYSIS is set and never fails the submission
    """
    try:
        contact = _parse_section(contact_info, ContactInfo, "Contact")
        filing = _parse_section(filing_info, FilingInfo, "Filing")
        income = _parse_section(income_info, IncomeInfo, "Income")
        incoming = await _read_uploads(files or [], require_files=False)

        documents = await pipeline.store_all(incoming)

        analyses = {}
        if config.ENABLE_AI_ANALYSIS and documents:
            try:
                logger.info(f"Starting AI document analysis for {len(documents)} document(s)")
                results = await pipeline.analyzer.analyze(documents)
                analyses = {index: r.analysis for index, r in enumerate(results) if r.analysis}
                logger.info(f"Completed analysis for {len(analyses)} document(s)")
                logger.debug(summarize_results(results))
            except Exception as e:
                logger.error(f"Document analysis failed (continuing without analysis): {str(e)}")

        submission = IntakeSubmission(
            contact_info=contact,
            filing_info=filing,
            income_info=income,
            documents=[
                SubmittedDocument(**doc.model_dump(), analysis=analyses.get(index))
                for index, doc in enumerate(documents)
            ],
            account_id=account_id
        )

        submission_id = None
        try:
            submission_id = await submission_store.save(submission)
        except StorageError as e:
            logger.error(f"Failed to save intake data: {str(e)}")

        return IntakeResponse(
            message="Intake submission received successfully",
            submission_id=submission_id
        )

    except ValidationError as e:
        logger.warning(f"Rejected intake submission: {str(e)}")
        return error_response(str(e), 400, e.code)
    except StorageError as e:
        logger.error(f"Storage error during intake: {str(e)}")
        return error_response(str(e), 500, e.code)
    except Exception as e:
        logger.exception(f"Intake submission error: {str(e)}")
        return error_response("Internal server error", 500, ErrorCode.SERVER_ERROR)


@router.get("/download", responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def download_document(
    path: Optional[str] = Query(None),
    filename: str = Query("document"),
    upload_store: UploadStore = Depends(get_upload_store)
):
    """
    Stream a stored document back as an attachment
    """
    if not path:
        return error_response("Path required", 400, ErrorCode.VALIDATION_ERROR)

    try:
        content = await upload_store.read(path)
    except StorageError as e:
        logger.warning(f"Download failed for {path}: {str(e)}")
        return error_response("File not found", 404, ErrorCode.NOT_FOUND)

    safe_name = sanitize_filename(filename)
    media_type = DOWNLOAD_CONTENT_TYPES.get(Path(safe_name).suffix.lower(), "application/octet-stream")
    logger.info(f"Serving stored document {path} as {safe_name}")
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{safe_name}"'}
    )


@router.get("/health")
async def health_check():
    """
    API health check endpoint
    """
    return {
        "status": "healthy",
        "message": "Filing Intake service is running",
        "version": "1.0.0"
    }


@router.get("/")
async def root():
    """
    Root endpoint with API information
    """
    return {
        "message": "Filing Intake API",
        "version": "1.0.0",
        "endpoints": {
            "analyze": "POST /analyze - Upload documents and get AI strategy insights",
            "intake": "POST /intake - Submit a full client intake",
            "download": "GET /download?path=... - Download a stored document",
            "health": "GET /health - Health check"
        }
    }
