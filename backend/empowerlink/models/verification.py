import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from empowerlink.models.base import Base


class DocumentType(str, enum.Enum):
    PASSPORT = "passport"
    NATIONAL_ID = "national_id"
    DRIVERS_LICENSE = "drivers_license"
    BUSINESS_REGISTRATION = "business_registration"
    NGO_CERTIFICATE = "ngo_certificate"


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED_FOR_REVIEW = "flagged_for_review"


DECISION_STATUSES = frozenset(
    {VerificationStatus.APPROVED, VerificationStatus.REJECTED, VerificationStatus.FLAGGED_FOR_REVIEW}
)
TERMINAL_STATUSES = frozenset({VerificationStatus.APPROVED, VerificationStatus.REJECTED})


class DocumentVerification(Base):
    __tablename__ = "document_verifications"

    id = Column(Integer, primary_key=True)
    subject_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    document_type = Column(Enum(DocumentType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    document_front_ref = Column(String(255), nullable=True)
    document_back_ref = Column(String(255), nullable=True)
    status = Column(
        Enum(VerificationStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=VerificationStatus.PENDING,
    )
    review_notes = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    subject = relationship("User", foreign_keys=[subject_user_id], back_populates="verifications")
    reviewer = relationship("User", foreign_keys=[reviewed_by])
