from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from empowerlink.core.errors import AuthenticationError, AuthorizationError, GatewayError, NotFoundError
from empowerlink.core.logging import get_logger
from empowerlink.db.session import Database
from empowerlink.gateways.identity import IdentityGateway, Principal
from empowerlink.models.user import User
from empowerlink.services.audit import record_audit

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeletionResult:
    user_id: int
    audit_recorded: bool


class UserAdministration:
    def __init__(self, database: Database, identity: IdentityGateway) -> None:
        self.database = database
        self.identity = identity

    def delete_user(
        self,
        caller: Optional[Principal],
        user_id: int,
        *,
        ip: Optional[str] = None,
        ua: Optional[str] = None,
    ) -> DeletionResult:
        """Delete ``user_id`` and then write an audit entry.

        The deletion decides the outcome. The audit insert runs in its own
        transaction afterwards; if it fails the error is logged and reported
        through ``audit_recorded`` only.
        """
        if caller is None:
            raise AuthenticationError("You are not authenticated.")
        try:
            allowed = self.identity.is_admin(caller)
        except GatewayError as exc:
            logger.error("is_admin_check_failed", caller_id=caller.id, error=exc.message)
            allowed = False
        if not allowed:
            raise AuthorizationError("You are not authorized to perform this action.")

        try:
            with self.database.session() as db:
                user = db.get(User, user_id)
                if user is None:
                    raise NotFoundError("User not found")
                db.delete(user)
                db.commit()
        except SQLAlchemyError as exc:
            raise GatewayError("Could not delete user") from exc
        logger.info("user_deleted", user_id=user_id, actor_id=caller.id)

        return DeletionResult(user_id=user_id, audit_recorded=self._audit_deletion(caller, user_id, ip=ip, ua=ua))

    def _audit_deletion(self, caller: Principal, user_id: int, *, ip: Optional[str], ua: Optional[str]) -> bool:
        # a self-deleted admin no longer exists to reference; the email in details still names them
        actor_id = None if caller.id == user_id else caller.id
        try:
            with self.database.session() as db:
                record_audit(
                    db,
                    actor_id=actor_id,
                    action="user_deleted",
                    target_type="user",
                    target_id=user_id,
                    details={"deleted_by": caller.email},
                    ip=ip,
                    ua=ua,
                )
                db.commit()
        except Exception as exc:  # noqa: BLE001
            logger.error("audit_write_failed", action="user_deleted", target_id=user_id, error=str(exc))
            return False
        return True
