"""Identity verification review workflow.

A request starts ``pending`` and is changed only by :meth:`VerificationWorkflow.decide`::

    pending --approve--> approved
    pending --reject (notes required)--> rejected
    pending --flag--> flagged_for_review  (may be decided again)

Each decision is a single-row overwrite of status, notes and reviewer; no
history is kept. Whether approved/rejected may be overwritten again is
controlled by ``enforce_terminal_states``.
"""

from typing import Optional

from empowerlink.core.errors import AuthenticationError, ValidationError
from empowerlink.core.logging import get_logger
from empowerlink.gateways.identity import Principal
from empowerlink.gateways.persistence import VerificationStore
from empowerlink.models.verification import (
    DECISION_STATUSES,
    TERMINAL_STATUSES,
    DocumentType,
    VerificationStatus,
)
from empowerlink.schemas.verification import VerificationRead

logger = get_logger(__name__)


class VerificationWorkflow:
    def __init__(self, store: VerificationStore, *, enforce_terminal_states: bool = False) -> None:
        self.store = store
        self.enforce_terminal_states = enforce_terminal_states

    def list_pending(self, reviewer: Optional[Principal]) -> list[VerificationRead]:
        """Every request visible to ``reviewer``, newest submission first."""
        if reviewer is None:
            raise AuthenticationError("You must be logged in to view verification requests.")
        return self.store.list_visible(reviewer)

    def get(self, request_id: int, viewer: Optional[Principal]) -> VerificationRead:
        if viewer is None:
            raise AuthenticationError("You must be logged in to view verification requests.")
        return self.store.get(viewer, request_id)

    def submit(
        self,
        subject: Optional[Principal],
        *,
        document_type: DocumentType,
        front_ref: Optional[str],
        back_ref: Optional[str] = None,
    ) -> VerificationRead:
        if subject is None:
            raise AuthenticationError("You must be logged in to submit documents.")
        request = self.store.insert(
            subject,
            document_type=document_type,
            front_ref=front_ref,
            back_ref=back_ref,
        )
        logger.info(
            "verification_submitted",
            request_id=request.id,
            subject_user_id=subject.id,
            document_type=request.document_type.value,
        )
        return request

    def decide(
        self,
        request_id: int,
        target_status: VerificationStatus | str,
        notes: Optional[str],
        reviewer: Optional[Principal],
    ) -> VerificationRead:
        """Record a review decision.

        ``reviewed_by`` is always taken from ``reviewer``, the authenticated
        caller. Rejections need non-empty notes; for any other decision the
        notes are optional.
        """
        if reviewer is None:
            raise AuthenticationError("You must be logged in to perform this action.")
        try:
            status = VerificationStatus(target_status)
        except ValueError as exc:
            raise ValidationError(f"Unknown verification status: {target_status}") from exc
        if status not in DECISION_STATUSES:
            raise ValidationError(f"Cannot set a verification request to {status.value}.")

        cleaned_notes = (notes or "").strip()
        if status == VerificationStatus.REJECTED and not cleaned_notes:
            raise ValidationError("Review notes are required for rejection.")

        updated = self.store.update_decision(
            reviewer,
            request_id,
            status=status,
            review_notes=cleaned_notes or None,
            reviewed_by=reviewer.id,
            locked_statuses=TERMINAL_STATUSES if self.enforce_terminal_states else frozenset(),
        )
        logger.info(
            "verification_decided",
            request_id=updated.id,
            status=updated.status.value,
            reviewer_id=reviewer.id,
        )
        return updated
