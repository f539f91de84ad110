from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = Field(default="EmpowerLink")
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=30)
    minio_endpoint: str | None = Field(default=None)
    minio_access_key: str = Field(default="")
    minio_secret_key: str = Field(default="")
    minio_bucket: str = Field(default="verification-documents")
    minio_secure: bool = Field(default=False)
    upload_dir: str = Field(default="/tmp/empowerlink-documents")
    rate_limit: str = Field(default="50/minute")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    # approved/rejected stay overwritable unless this is switched on
    enforce_terminal_states: bool = Field(default=False)
    admin_email: str = Field(default="admin@empowerlink.org")
    admin_password: str = Field(default="ChangeMe123!")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
