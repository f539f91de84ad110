from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from empowerlink.api.deps import get_database
from empowerlink.core.errors import GatewayError
from empowerlink.db.session import Database

router = APIRouter(tags=["health"])


@router.get("/health")
def health(database: Database = Depends(get_database)) -> dict[str, str]:
    try:
        database.ping()
    except SQLAlchemyError as exc:
        raise GatewayError("Database unavailable") from exc
    return {"status": "ok"}
