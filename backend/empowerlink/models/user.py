import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from empowerlink.models.base import Base


class UserType(str, enum.Enum):
    VENDOR = "vendor"
    NGO = "ngo"
    CORPORATE = "corporate"
    ADMIN = "admin"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    SUPPORT = "support"
    MEMBER = "member"


REVIEWER_ROLES = frozenset({UserRole.ADMIN, UserRole.MODERATOR})


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    phone = Column(String(50), nullable=True)
    organization = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    user_type = Column(Enum(UserType, values_callable=lambda e: [m.value for m in e]), nullable=True)
    role = Column(
        Enum(UserRole, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.MEMBER,
    )
    status = Column(
        Enum(UserStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    verifications = relationship(
        "DocumentVerification",
        foreign_keys="DocumentVerification.subject_user_id",
        back_populates="subject",
        cascade="all, delete-orphan",
    )
