"""
Turns stored document bytes into chat message content for the analysis model.

Images are sent inline as base64 data URLs, PDFs are reduced to their text
layer with pdfplumber and plain text is decoded as UTF-8.
"""
import base64
import io
from typing import Dict, List

import pdfplumber

from filing_intake.utils.exceptions import AnalysisError

IMAGE_TYPES = {"image/png": "image/png", "image/jpeg": "image/jpeg", "image/jpg": "image/jpeg"}
PDF_TYPE = "application/pdf"
TEXT_TYPE = "text/plain"

# Keeps the prompt well inside the model context window
MAX_DOCUMENT_CHARS = 20000


def extract_pdf_text(pdf_bytes: bytes) -> str:
    try:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
        return "\n".join(pages).strip()
    except Exception as exc:
        raise AnalysisError(f"PDF text extraction failed: {exc}") from exc


def build_message_content(prompt: str, content: bytes, content_type: str, filename: str) -> List[Dict]:
    """Build the user message content parts for one document"""
    media_type = (content_type or "").split(";")[0].strip().lower()

    if media_type in IMAGE_TYPES:
        encoded = base64.b64encode(content).decode("utf-8")
        return [
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": f"data:{IMAGE_TYPES[media_type]};base64,{encoded}"}},
        ]

    if media_type == PDF_TYPE:
        text = extract_pdf_text(content)
        if not text:
            raise AnalysisError(f"No extractable text in PDF {filename} (scanned PDFs are not supported)")
    elif media_type == TEXT_TYPE:
        text = content.decode("utf-8", errors="replace").strip()
        if not text:
            raise AnalysisError(f"Document {filename} is empty")
    else:
        raise AnalysisError(f"Unsupported document type: {content_type or 'unknown'}")

    return [
        {"type": "text", "text": f"{prompt}\n\nDOCUMENT ({filename}):\n{text[:MAX_DOCUMENT_CHARS]}"},
    ]
