from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from empowerlink.api.deps import get_db, get_optional_principal, get_user_admin, require_role
from empowerlink.gateways.identity import Principal
from empowerlink.models.audit import AuditLog
from empowerlink.models.user import UserRole
from empowerlink.schemas.audit import AuditLogRead
from empowerlink.schemas.user import UserDeleted
from empowerlink.services.users import UserAdministration

router = APIRouter(prefix="/admin", tags=["admin"])


@router.delete("/users/{user_id}", response_model=UserDeleted)
def delete_user(
    user_id: int,
    request: Request,
    user_admin: UserAdministration = Depends(get_user_admin),
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> UserDeleted:
    result = user_admin.delete_user(
        principal,
        user_id,
        ip=request.client.host if request.client else None,
        ua=request.headers.get("user-agent"),
    )
    return UserDeleted(message="User deleted successfully.", user_id=result.user_id, audit_recorded=result.audit_recorded)


@router.get("/audit", response_model=list[AuditLogRead])
def list_audit(
    actor_id: Optional[int] = None,
    action: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user=Depends(require_role(UserRole.ADMIN)),
):
    query = db.query(AuditLog)
    if actor_id is not None:
        query = query.filter(AuditLog.actor_id == actor_id)
    if action is not None:
        query = query.filter(AuditLog.action == action)
    if start is not None:
        query = query.filter(AuditLog.created_at >= start)
    if end is not None:
        query = query.filter(AuditLog.created_at <= end)
    return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(200).all()
