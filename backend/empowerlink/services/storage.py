import hashlib
import io
from pathlib import Path
from typing import Optional

from minio import Minio

from empowerlink.core.config import Settings
from empowerlink.core.logging import get_logger

logger = get_logger(__name__)


class StorageService:
    """Stores verification document images and hands back an opaque reference."""

    def __init__(self, client: Optional[Minio], bucket: str, fallback_dir: Path) -> None:
        self.client = client
        self.bucket = bucket
        self.fallback_dir = fallback_dir
        self.fallback_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageService":
        client = None
        if settings.minio_endpoint:
            client = Minio(
                settings.minio_endpoint,
                access_key=settings.minio_access_key,
                secret_key=settings.minio_secret_key,
                secure=settings.minio_secure,
            )
        return cls(client, settings.minio_bucket, Path(settings.upload_dir))

    def ensure_bucket(self) -> None:
        if self.client is None:
            return
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
        except Exception as exc:  # noqa: BLE001
            logger.warning("minio_unavailable_using_local_storage", error=str(exc))

    def upload(self, *, content: bytes, filename: str, content_type: str) -> tuple[str, str]:
        digest = hashlib.sha256(content).hexdigest()
        object_name = f"{digest}/{Path(filename).name}"
        if self.client is not None:
            try:
                self.client.put_object(
                    self.bucket,
                    object_name,
                    data=io.BytesIO(content),
                    length=len(content),
                    content_type=content_type,
                )
                return f"s3://{self.bucket}/{object_name}", digest
            except Exception as exc:  # noqa: BLE001
                logger.warning("minio_upload_failed_storing_locally", error=str(exc), object_name=object_name)
        local_path = self.fallback_dir / object_name.replace("/", "_")
        local_path.write_bytes(content)
        return str(local_path), digest
