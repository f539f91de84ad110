from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from empowerlink.api.deps import get_db, get_identity
from empowerlink.core.security import get_password_hash
from empowerlink.gateways.identity import IdentityGateway
from empowerlink.models.user import User, UserRole, UserStatus
from empowerlink.schemas.auth import LoginRequest, Token
from empowerlink.schemas.user import UserCreate, UserRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserCreate, db: Session = Depends(get_db)):
    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    user = User(
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        organization=payload.organization,
        location=payload.location,
        user_type=payload.user_type,
        password_hash=get_password_hash(payload.password),
        role=UserRole.MEMBER,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, identity: IdentityGateway = Depends(get_identity)) -> Token:
    principal = identity.authenticate(email=payload.email, password=payload.password)
    if not principal:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if principal.is_suspended:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account suspended")
    return Token(access_token=identity.issue_token(principal))
