"""Identity gateway: who is calling and what they are allowed to do.

Tokens are HS256 JWTs carrying the user id as ``sub``. The role is never
trusted from the token; every resolution reads the user row so role changes
and suspensions apply immediately.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError

from empowerlink.core.errors import AuthenticationError, GatewayError
from empowerlink.core.security import create_access_token, decode_access_token, verify_password
from empowerlink.db.session import Database
from empowerlink.models.user import REVIEWER_ROLES, User, UserRole, UserStatus


@dataclass(frozen=True)
class Principal:
    id: int
    email: str
    role: UserRole
    status: UserStatus

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES

    @property
    def is_suspended(self) -> bool:
        return self.status == UserStatus.SUSPENDED

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(id=user.id, email=user.email, role=user.role, status=user.status)


class IdentityGateway:
    def __init__(self, database: Database, *, secret: str, algorithm: str, token_ttl: timedelta) -> None:
        self.database = database
        self.secret = secret
        self.algorithm = algorithm
        self.token_ttl = token_ttl

    def authenticate(self, *, email: str, password: str) -> Optional[Principal]:
        with self.database.session() as db:
            user = db.query(User).filter(User.email == email).first()
            if not user:
                return None
            if not verify_password(password, user.password_hash):
                return None
            return Principal.from_user(user)

    def issue_token(self, principal: Principal) -> str:
        return create_access_token(
            str(principal.id),
            secret=self.secret,
            algorithm=self.algorithm,
            expires_delta=self.token_ttl,
            extra={"role": principal.role.value},
        )

    def resolve(self, token: str) -> Principal:
        try:
            payload = decode_access_token(token, secret=self.secret, algorithm=self.algorithm)
        except JWTError as exc:
            raise AuthenticationError("Invalid token") from exc
        user_id = payload.get("sub")
        if user_id is None:
            raise AuthenticationError("Invalid token")
        try:
            with self.database.session() as db:
                user = db.get(User, int(user_id))
                principal = Principal.from_user(user) if user else None
        except SQLAlchemyError as exc:
            raise GatewayError("Identity lookup failed") from exc
        if principal is None:
            raise AuthenticationError("User not found")
        return principal

    def is_admin(self, principal: Principal) -> bool:
        try:
            with self.database.session() as db:
                role = db.query(User.role).filter(User.id == principal.id).scalar()
        except SQLAlchemyError as exc:
            raise GatewayError("Admin check failed") from exc
        return role == UserRole.ADMIN
