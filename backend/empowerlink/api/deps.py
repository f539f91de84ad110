from typing import Generator, Optional

from fastapi import Depends, Request, Security
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from empowerlink.core.errors import AuthenticationError, AuthorizationError
from empowerlink.db.session import Database
from empowerlink.gateways.identity import IdentityGateway, Principal
from empowerlink.models.user import UserRole
from empowerlink.services.storage import StorageService
from empowerlink.services.users import UserAdministration
from empowerlink.services.verification import VerificationWorkflow

# auto_error is off so an absent token reaches the services as "no caller"
reusable_oauth2 = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    with database.session() as db:
        yield db


def get_identity(request: Request) -> IdentityGateway:
    return request.app.state.identity


def get_storage(request: Request) -> StorageService:
    return request.app.state.storage


def get_workflow(request: Request) -> VerificationWorkflow:
    return request.app.state.workflow


def get_user_admin(request: Request) -> UserAdministration:
    return request.app.state.user_admin


def get_optional_principal(
    token: Optional[str] = Security(reusable_oauth2),
    identity: IdentityGateway = Depends(get_identity),
) -> Optional[Principal]:
    if not token:
        return None
    principal = identity.resolve(token)
    if principal.is_suspended:
        raise AuthorizationError("Account suspended")
    return principal


def get_current_principal(principal: Optional[Principal] = Depends(get_optional_principal)) -> Principal:
    if principal is None:
        raise AuthenticationError("Not authenticated")
    return principal


def require_role(*roles: UserRole):
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise AuthorizationError("Insufficient permissions")
        return principal

    return dependency
