from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from empowerlink.models.verification import DocumentType, VerificationStatus


class SubjectProfile(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class VerificationRead(BaseModel):
    id: int
    subject_user_id: int
    document_type: DocumentType
    document_front_ref: Optional[str]
    document_back_ref: Optional[str]
    status: VerificationStatus
    review_notes: Optional[str]
    reviewed_by: Optional[int]
    created_at: datetime
    subject: Optional[SubjectProfile] = None

    model_config = {
        "from_attributes": True,
    }


class VerificationDecision(BaseModel):
    status: VerificationStatus
    review_notes: str = Field(default="", max_length=2000)
