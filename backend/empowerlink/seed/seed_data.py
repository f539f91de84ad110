from sqlalchemy.orm import Session

from empowerlink.core.config import Settings, get_settings
from empowerlink.core.security import get_password_hash
from empowerlink.db.session import Database
from empowerlink.models.user import User, UserRole, UserStatus, UserType


def get_or_create_admin(db: Session, settings: Settings) -> User:
    admin = db.query(User).filter(User.email == settings.admin_email).first()
    if admin:
        return admin
    admin = User(
        email=settings.admin_email,
        first_name="Platform",
        last_name="Administrator",
        user_type=UserType.ADMIN,
        password_hash=get_password_hash(settings.admin_password),
        role=UserRole.ADMIN,
        status=UserStatus.ACTIVE,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


if __name__ == "__main__":
    settings = get_settings()
    database = Database(settings.database_url)
    database.create_all()
    with database.session() as session:
        get_or_create_admin(session, settings)
