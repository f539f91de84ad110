from datetime import datetime

from pydantic import BaseModel


class AuditLogRead(BaseModel):
    id: int
    actor_id: int | None
    action: str
    target_type: str | None
    target_id: str | None
    details: str | None
    ip: str | None
    ua: str | None
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }
