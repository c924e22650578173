from pydantic import EmailStr, Field, model_validator
from typing import Optional, List
from enum import Enum
from datetime import datetime, timezone

from .document import CamelModel, UploadedDocument, DocumentAnalysis


class FilingType(str, Enum):
    INDIVIDUAL = "Individual"
    MARRIED_JOINT = "Married Filing Jointly"
    MARRIED_SEPARATE = "Married Filing Separately"
    HEAD_OF_HOUSEHOLD = "Head of Household"
    BUSINESS = "Business (LLC/Sole Prop/S-Corp)"

class ContactInfo(CamelModel):
    full_name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=10)

class FilingInfo(CamelModel):
    filing_type: FilingType
    is_returning_client: bool

class IncomeInfo(CamelModel):
    income_types: List[str] = Field(default_factory=list)
    other_income: Optional[str] = None

    @model_validator(mode="after")
    def _require_some_income(self):
        if not self.income_types and not (self.other_income and self.other_income.strip()):
            raise ValueError("Please select at least one income type or describe other income")
        return self

class SubmittedDocument(UploadedDocument):
    """An uploaded document as recorded on a submission, with its analysis if one ran"""
    analysis: Optional[DocumentAnalysis] = None

class IntakeSubmission(CamelModel):
    contact_info: ContactInfo
    filing_info: FilingInfo
    income_info: IncomeInfo
    documents: List[SubmittedDocument] = Field(default_factory=list)
    account_id: Optional[str] = None
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
