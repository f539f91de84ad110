import hashlib
import json
from typing import Any, Optional

from sqlalchemy.orm import Session

from empowerlink.models.audit import AuditLog


def record_audit(
    db: Session,
    *,
    actor_id: Optional[int],
    action: str,
    target_type: Optional[str],
    target_id: Optional[Any],
    details: dict[str, Any],
    ip: Optional[str] = None,
    ua: Optional[str] = None,
) -> AuditLog:
    payload = json.dumps(details, sort_keys=True, default=str)
    hash_value = hashlib.sha256(payload.encode()).hexdigest()
    log = AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        details=payload,
        ip=ip,
        ua=ua[:255] if ua else None,
        hash=hash_value,
    )
    db.add(log)
    db.flush()
    return log
