import os
from datetime import datetime
from typing import Callable, Generator, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "testsecret")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
os.environ.setdefault("RATE_LIMIT", "1000/minute")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "Admin1234!")

from empowerlink.core.config import Settings  # noqa: E402
from empowerlink.core.security import get_password_hash  # noqa: E402
from empowerlink.db.session import Database  # noqa: E402
from empowerlink.gateways.identity import IdentityGateway, Principal  # noqa: E402
from empowerlink.main import create_app  # noqa: E402
from empowerlink.models.user import User, UserRole, UserStatus, UserType  # noqa: E402
from empowerlink.models.verification import DocumentType, DocumentVerification, VerificationStatus  # noqa: E402
from empowerlink.seed.seed_data import get_or_create_admin  # noqa: E402
from empowerlink.services.storage import StorageService  # noqa: E402


@pytest.fixture(scope="session")
def settings() -> Settings:
    return Settings()


@pytest.fixture(scope="session")
def database(settings: Settings) -> Generator[Database, None, None]:
    db = Database(settings.database_url)
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture(scope="session")
def app(settings: Settings, database: Database, tmp_path_factory: pytest.TempPathFactory) -> FastAPI:
    storage = StorageService(None, settings.minio_bucket, tmp_path_factory.mktemp("documents"))
    return create_app(settings, database=database, storage=storage)


@pytest.fixture(autouse=True)
def prepare_database(database: Database, settings: Settings) -> Generator[None, None, None]:
    database.drop_all()
    database.create_all()
    with database.session() as session:
        get_or_create_admin(session, settings)
    yield


@pytest.fixture()
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def identity(app: FastAPI) -> IdentityGateway:
    return app.state.identity


@pytest.fixture()
def admin(database: Database, settings: Settings) -> Principal:
    with database.session() as session:
        return Principal.from_user(get_or_create_admin(session, settings))


@pytest.fixture()
def make_user(database: Database) -> Callable[..., Principal]:
    def factory(
        email: str,
        *,
        role: UserRole = UserRole.MEMBER,
        user_type: UserType = UserType.VENDOR,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> Principal:
        with database.session() as session:
            user = User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                user_type=user_type,
                password_hash=get_password_hash("Password123!"),
                role=role,
                status=UserStatus.ACTIVE,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return Principal.from_user(user)

    return factory


@pytest.fixture()
def add_request(database: Database) -> Callable[..., int]:
    def factory(
        subject: Principal,
        *,
        document_type: DocumentType = DocumentType.PASSPORT,
        created_at: Optional[datetime] = None,
    ) -> int:
        with database.session() as session:
            row = DocumentVerification(
                subject_user_id=subject.id,
                document_type=document_type,
                document_front_ref="s3://documents/front.png",
                status=VerificationStatus.PENDING,
            )
            if created_at is not None:
                row.created_at = created_at
            session.add(row)
            session.commit()
            return row.id

    return factory


@pytest.fixture()
def fetch_request(database: Database) -> Callable[[int], Optional[DocumentVerification]]:
    def fetch(request_id: int) -> Optional[DocumentVerification]:
        with database.session() as session:
            return session.get(DocumentVerification, request_id)

    return fetch
