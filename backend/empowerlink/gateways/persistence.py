"""Record store for verification requests with row-level permission checks.

Reviewers (admin, moderator) see and update every row. Everyone else sees
only requests where they are the subject and cannot update any. Rows a
viewer may not see behave exactly like missing rows.

Joined subject profiles are normalized into :class:`SubjectProfile` here so
callers only ever deal with :class:`VerificationRead`.
"""

from typing import Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from empowerlink.core.errors import GatewayError, InvalidTransitionError, NotFoundError, PermissionDeniedError
from empowerlink.db.session import Database
from empowerlink.gateways.identity import Principal
from empowerlink.models.verification import DocumentType, DocumentVerification, VerificationStatus
from empowerlink.schemas.verification import VerificationRead


class VerificationStore(Protocol):
    def list_visible(self, viewer: Principal) -> list[VerificationRead]: ...

    def get(self, viewer: Principal, request_id: int) -> VerificationRead: ...

    def insert(
        self,
        subject: Principal,
        *,
        document_type: DocumentType,
        front_ref: Optional[str],
        back_ref: Optional[str],
    ) -> VerificationRead: ...

    def update_decision(
        self,
        viewer: Principal,
        request_id: int,
        *,
        status: VerificationStatus,
        review_notes: Optional[str],
        reviewed_by: int,
        locked_statuses: frozenset[VerificationStatus] = ...,
    ) -> VerificationRead: ...


class SqlVerificationStore:
    def __init__(self, database: Database) -> None:
        self.database = database

    def list_visible(self, viewer: Principal) -> list[VerificationRead]:
        query = (
            select(DocumentVerification)
            .options(joinedload(DocumentVerification.subject))
            .order_by(DocumentVerification.created_at.desc(), DocumentVerification.id.desc())
        )
        if not viewer.is_reviewer:
            query = query.where(DocumentVerification.subject_user_id == viewer.id)
        try:
            with self.database.session() as db:
                rows = db.scalars(query).all()
                return [VerificationRead.model_validate(row) for row in rows]
        except SQLAlchemyError as exc:
            raise GatewayError("Could not load verification requests") from exc

    def get(self, viewer: Principal, request_id: int) -> VerificationRead:
        try:
            with self.database.session() as db:
                row = self._visible_row(db, viewer, request_id)
                return VerificationRead.model_validate(row)
        except SQLAlchemyError as exc:
            raise GatewayError("Could not load verification request") from exc

    def insert(
        self,
        subject: Principal,
        *,
        document_type: DocumentType,
        front_ref: Optional[str],
        back_ref: Optional[str],
    ) -> VerificationRead:
        try:
            with self.database.session() as db:
                row = DocumentVerification(
                    subject_user_id=subject.id,
                    document_type=document_type,
                    document_front_ref=front_ref,
                    document_back_ref=back_ref,
                    status=VerificationStatus.PENDING,
                )
                db.add(row)
                db.commit()
                db.refresh(row)
                return VerificationRead.model_validate(row)
        except SQLAlchemyError as exc:
            raise GatewayError("Could not store verification request") from exc

    def update_decision(
        self,
        viewer: Principal,
        request_id: int,
        *,
        status: VerificationStatus,
        review_notes: Optional[str],
        reviewed_by: int,
        locked_statuses: frozenset[VerificationStatus] = frozenset(),
    ) -> VerificationRead:
        """Overwrite the decision fields of one row.

        Rows whose current status is in ``locked_statuses`` are left untouched
        and :class:`InvalidTransitionError` is raised. The status guard is
        evaluated by the UPDATE statement itself, not by the earlier select.
        """
        try:
            with self.database.session() as db:
                row = self._visible_row(db, viewer, request_id)
                if not viewer.is_reviewer:
                    raise PermissionDeniedError("You are not allowed to review verification requests")
                statement = (
                    update(DocumentVerification)
                    .where(DocumentVerification.id == request_id)
                    .values(status=status, review_notes=review_notes, reviewed_by=reviewed_by)
                    .execution_options(synchronize_session=False)
                )
                if locked_statuses:
                    statement = statement.where(DocumentVerification.status.not_in(list(locked_statuses)))
                result = db.execute(statement)
                if result.rowcount == 0:
                    db.rollback()
                    current = db.scalar(
                        select(DocumentVerification.status).where(DocumentVerification.id == request_id)
                    )
                    if current is None:
                        raise NotFoundError("Verification request not found")
                    raise InvalidTransitionError(
                        f"Verification request is already {current.value} and cannot be changed."
                    )
                db.commit()
                db.refresh(row)
                return VerificationRead.model_validate(row)
        except SQLAlchemyError as exc:
            raise GatewayError("Could not update verification request") from exc

    @staticmethod
    def _visible_row(db: Session, viewer: Principal, request_id: int) -> DocumentVerification:
        query = (
            select(DocumentVerification)
            .options(joinedload(DocumentVerification.subject))
            .where(DocumentVerification.id == request_id)
        )
        if not viewer.is_reviewer:
            query = query.where(DocumentVerification.subject_user_id == viewer.id)
        row = db.scalars(query).first()
        if row is None:
            raise NotFoundError("Verification request not found")
        return row
