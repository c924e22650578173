import json
import re
from typing import List, Dict, Any, Optional, Sequence

import groq
from groq import AsyncGroq
from pydantic import ValidationError as PydanticValidationError

from filing_intake.config import settings
from filing_intake.models.document import (
    AnalysisResult,
    Confidence,
    DocumentAnalysis,
    ExtractedAmount,
    ExtractedData,
    UploadedDocument,
)
from filing_intake.services.document_content import build_message_content
from filing_intake.services.upload_store import UploadStore
from filing_intake.utils.logger import get_logger
from filing_intake.utils.exceptions import AnalysisError, StorageError

logger = get_logger(__name__)

AI_UNAVAILABLE_MESSAGE = "AI analysis unavailable. Set GROQ_API_KEY and restart the service."

ANALYSIS_PROMPT = """Analyze this tax document and extract key information to identify tax optimization strategies.

Extract:
1. Document type (W-2, 1099-NEC, 1099-K, 1099-INT, 1099-DIV, 1098, Schedule C, etc.)
2. Tax year
3. All monetary amounts (wages, income, deductions, taxes withheld, mortgage interest, etc.)
4. Employer/payer name
5. Recipient/taxpayer name (never include a full SSN; show the last 4 digits at most)

Then identify potential tax strategies based on the data:
- Retirement contribution opportunities (401k, IRA, SEP-IRA, etc.)
- Deduction maximization and business expense optimization
- Income timing opportunities
- Itemized deductions (mortgage interest, property tax, charitable giving)

Respond with a single JSON object with these keys:
- "documentType": string
- "confidence": "high" | "medium" | "low"
- "extractedData": {"year": string, "amounts": [{"label": string, "value": number}], "employer": string, "payer": string, "recipient": string}
- "summary": a short summary highlighting the most impactful strategies
- "notes": an array of short, actionable strategy notes"""

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")
_DOCUMENT_TYPE = re.compile(r"document type[:\s]+([A-Z0-9-]+)", re.IGNORECASE)
_TAX_YEAR = re.compile(r"(?:tax year|year)[:\s]+(\d{4})", re.IGNORECASE)
_DOLLAR_AMOUNT = re.compile(r"\$\s?(\d[\d,]*(?:\.\d+)?)")


class DocumentAnalyzer:
    """
    Sends each stored document to the Groq chat completions API and returns
    one AnalysisResult per document, in input order.

    Failures are isolated per document: a document that cannot be read,
    is of an unsupported type, times out or yields no usable response gets
    an error result while the remaining documents are still analyzed.
    Each document gets exactly one attempt.
    """

    def __init__(self, upload_store: UploadStore, client: Optional[AsyncGroq] = None, config=None):
        self.logger = logger
        self.config = config or settings
        self.upload_store = upload_store
        self.client = client

        if self.client is None and self.config.GROQ_API_KEY:
            self.client = AsyncGroq(
                api_key=self.config.GROQ_API_KEY,
                timeout=self.config.AI_TIMEOUT_SECONDS,
                max_retries=0,
            )
            self.logger.info("Groq client initialized")

        if self.client is None:
            self.logger.warning("GROQ_API_KEY not configured, document analysis will be skipped")

    async def analyze(self, documents: Sequence[UploadedDocument]) -> List[AnalysisResult]:
        results: List[AnalysisResult] = []

        for index, document in enumerate(documents, 1):
            self.logger.info(f"Analyzing document {index}/{len(documents)}: {document.filename}")
            try:
                analysis = await self._analyze_document(document)
                results.append(AnalysisResult(filename=document.filename, analysis=analysis))
                self.logger.info(f"Analysis complete for {document.filename}: {analysis.document_type}")
            except AnalysisError as e:
                self.logger.warning(f"Analysis failed for {document.filename}: {str(e)}")
                results.append(AnalysisResult(filename=document.filename, error=str(e)))
            except Exception as e:
                self.logger.exception(f"Unexpected error analyzing {document.filename}")
                results.append(AnalysisResult(filename=document.filename, error=str(e) or "Unknown error"))

        succeeded = sum(1 for r in results if r.succeeded)
        self.logger.info(f"Analyzed {succeeded} of {len(results)} document(s) successfully")
        return results

    async def _analyze_document(self, document: UploadedDocument) -> DocumentAnalysis:
        if self.client is None:
            raise AnalysisError(AI_UNAVAILABLE_MESSAGE)

        try:
            content = await self.upload_store.read(document.url_or_path)
        except StorageError as e:
            raise AnalysisError(f"Failed to download file: {str(e)}") from e

        message_content = build_message_content(
            ANALYSIS_PROMPT, content, document.content_type, document.filename
        )
        response_text = await self._request_analysis(message_content, document.filename)
        return parse_analysis_response(response_text)

    async def _request_analysis(self, message_content: List[Dict], filename: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.config.GROQ_MODEL,
                messages=[{"role": "user", "content": message_content}],
                temperature=self.config.AI_TEMPERATURE,
                max_tokens=self.config.AI_MAX_TOKENS,
                response_format={"type": "json_object"},
            )
        except groq.APITimeoutError as e:
            raise AnalysisError(
                f"AI analysis timed out after {self.config.AI_TIMEOUT_SECONDS:g}s"
            ) from e
        except groq.APIError as e:
            raise AnalysisError(f"AI service error: {str(e)}") from e

        if not response.choices or not response.choices[0].message.content:
            raise AnalysisError(f"No analysis returned for {filename}")

        return response.choices[0].message.content


def parse_analysis_response(response_text: str) -> DocumentAnalysis:
    """
    Parse the model's reply into a DocumentAnalysis.

    Tries a fenced JSON block, then the whole reply as JSON, then falls back to
    pulling the document type, year and dollar amounts out of free text.
    """
    parsed = None

    match = _FENCED_JSON.search(response_text)
    if match:
        try:
            parsed = json.loads(match.group(1))
        except json.JSONDecodeError:
            parsed = None

    if parsed is None:
        try:
            parsed = json.loads(response_text)
        except json.JSONDecodeError:
            parsed = None

    if isinstance(parsed, dict):
        return _analysis_from_payload(parsed, response_text)

    return _analysis_from_text(response_text)


def _analysis_from_payload(payload: Dict[str, Any], response_text: str) -> DocumentAnalysis:
    confidence = str(payload.get("confidence") or Confidence.MEDIUM.value).lower()
    if confidence not in {c.value for c in Confidence}:
        confidence = Confidence.MEDIUM.value

    notes = payload.get("notes") or []
    if isinstance(notes, str):
        notes = [notes]

    return DocumentAnalysis(
        document_type=str(payload.get("documentType") or payload.get("document_type") or "Unknown"),
        confidence=confidence,
        extracted_data=_extracted_data(payload.get("extractedData") or payload.get("extracted_data") or {}),
        summary=str(payload.get("summary") or response_text[:200]),
        notes=[str(note) for note in notes if note],
    )


def _extracted_data(raw: Any) -> ExtractedData:
    if not isinstance(raw, dict):
        return ExtractedData()

    data = dict(raw)
    if data.get("year") is not None:
        data["year"] = str(data["year"])
    try:
        return ExtractedData.model_validate(data)
    except PydanticValidationError:
        # Keep the scalar fields, drop malformed amounts
        return ExtractedData(
            year=data.get("year"),
            employer=_optional_str(data.get("employer")),
            payer=_optional_str(data.get("payer")),
            recipient=_optional_str(data.get("recipient")),
        )


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value else None


def _analysis_from_text(response_text: str) -> DocumentAnalysis:
    document_type = _DOCUMENT_TYPE.search(response_text)
    year = _TAX_YEAR.search(response_text)

    amounts = []
    for raw in _DOLLAR_AMOUNT.findall(response_text):
        try:
            amounts.append(ExtractedAmount(label="Amount", value=float(raw.replace(",", ""))))
        except ValueError:
            continue

    return DocumentAnalysis(
        document_type=document_type.group(1) if document_type else "Unknown",
        confidence=Confidence.LOW,
        extracted_data=ExtractedData(
            year=year.group(1) if year else None,
            amounts=amounts or None,
        ),
        summary=response_text[:300],
        notes=["Analysis extracted from text response - may need manual review"],
    )


def summarize_results(results: Sequence[AnalysisResult]) -> str:
    """Plain-text digest of a batch of analyses, for notifications and logs"""
    successful = [r for r in results if r.analysis]
    if not successful:
        return "No documents were successfully analyzed."

    parts = [f"Analyzed {len(successful)} of {len(results)} document(s):"]
    for result in successful:
        analysis = result.analysis
        parts.append("")
        parts.append(f"{result.filename}")
        parts.append(f"   Type: {analysis.document_type or 'Unknown'} ({analysis.confidence} confidence)")
        if analysis.extracted_data.year:
            parts.append(f"   Year: {analysis.extracted_data.year}")
        if analysis.extracted_data.amounts:
            total = sum(a.value for a in analysis.extracted_data.amounts)
            parts.append(f"   Total Amounts: ${total:,.2f}")
        parts.append(f"   Summary: {analysis.summary[:100]}...")

    return "\n".join(parts)
