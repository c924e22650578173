import asyncio
import errno
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import urlparse

import aiofiles
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from filing_intake.config import settings
from filing_intake.models.document import UploadedDocument
from filing_intake.utils.logger import get_logger
from filing_intake.utils.validators import sanitize_filename
from filing_intake.utils.exceptions import StorageError

logger = get_logger(__name__)

_READ_ONLY_ERRNOS = {errno.EROFS, errno.EPERM, errno.EACCES}


class UploadStore(ABC):
    """
    Persists uploaded files and hands back a reference that can be read later.

    No size or type validation happens here; callers validate before storing.
    Any backend failure is raised as StorageError.
    """

    @abstractmethod
    async def store(self, content: bytes, name: str,
                    content_type: str = "application/octet-stream") -> UploadedDocument:
        ...

    @abstractmethod
    async def read(self, url_or_path: str) -> bytes:
        ...

    @staticmethod
    def _stored_name(name: str) -> str:
        return f"{uuid.uuid4()}_{sanitize_filename(name)}"


class LocalUploadStore(UploadStore):
    """Stores uploads on the local filesystem under UPLOAD_DIR"""

    PUBLIC_PREFIX = "/uploads/"

    def __init__(self, upload_dir: str = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.logger = logger

    async def store(self, content: bytes, name: str,
                    content_type: str = "application/octet-stream") -> UploadedDocument:
        stored_name = self._stored_name(name)
        file_path = self.upload_dir / stored_name

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            self.logger.error(f"Local file storage failed for {name}: {str(e)}")
            if e.errno in _READ_ONLY_ERRNOS:
                raise StorageError(
                    "File upload is not configured. Please contact support or configure AWS S3 storage."
                ) from e
            raise StorageError(f"Failed to save file: {name}. {str(e)}") from e

        self.logger.info(f"Stored upload {name} -> {file_path} ({len(content)} bytes)")
        return UploadedDocument(
            filename=name,
            url_or_path=f"{self.PUBLIC_PREFIX}{stored_name}",
            size=len(content),
            content_type=content_type
        )

    async def read(self, url_or_path: str) -> bytes:
        file_path = self._resolve(url_or_path)
        try:
            async with aiofiles.open(file_path, 'rb') as f:
                return await f.read()
        except FileNotFoundError as e:
            raise StorageError(f"Stored file not found: {url_or_path}") from e
        except OSError as e:
            raise StorageError(f"Failed to read stored file {url_or_path}: {str(e)}") from e

    def _resolve(self, url_or_path: str) -> Path:
        relative = url_or_path
        if relative.startswith(self.PUBLIC_PREFIX):
            relative = relative[len(self.PUBLIC_PREFIX):]
        # References are flat names inside upload_dir
        if not relative or Path(relative).name != relative or relative in (".", ".."):
            raise StorageError(f"Invalid storage reference: {url_or_path}")
        return self.upload_dir / relative


class S3UploadStore(UploadStore):
    """Stores uploads in a private S3 bucket under the intakes/ prefix"""

    KEY_PREFIX = "intakes/"

    def __init__(self, bucket: str = None, region: str = None, client=None,
                 access_key_id: str = None, secret_access_key: str = None):
        self.bucket = bucket or settings.AWS_S3_BUCKET
        self.region = region or settings.AWS_REGION
        self.logger = logger
        self.client = client or boto3.client(
            "s3",
            region_name=self.region,
            aws_access_key_id=access_key_id or settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=secret_access_key or settings.AWS_SECRET_ACCESS_KEY,
        )

    async def store(self, content: bytes, name: str,
                    content_type: str = "application/octet-stream") -> UploadedDocument:
        key = f"{self.KEY_PREFIX}{self._stored_name(name)}"
        self.logger.info(f"Uploading {name} to s3://{self.bucket}/{key}")

        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except ClientError as e:
            raise self._translate_client_error(e) from e
        except BotoCoreError as e:
            self.logger.error(f"S3 upload failed for {name}: {str(e)}")
            raise StorageError(f"S3 upload failed: {str(e)}") from e

        return UploadedDocument(
            filename=name,
            url_or_path=self.object_url(key),
            size=len(content),
            content_type=content_type
        )

    async def read(self, url_or_path: str) -> bytes:
        key = self._key_from_url(url_or_path)
        try:
            response = await asyncio.to_thread(self.client.get_object, Bucket=self.bucket, Key=key)
            return await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            raise self._translate_client_error(e) from e
        except BotoCoreError as e:
            raise StorageError(f"S3 download failed: {str(e)}") from e

    def object_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def _key_from_url(self, url_or_path: str) -> str:
        parsed = urlparse(url_or_path)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise StorageError(f"Invalid storage reference: {url_or_path}")
        if parsed.hostname.split(".")[0] != self.bucket:
            raise StorageError(f"Reference does not belong to bucket {self.bucket}: {url_or_path}")
        return parsed.path.lstrip("/")

    def _translate_client_error(self, error: ClientError) -> StorageError:
        code = error.response.get("Error", {}).get("Code", "Unknown")
        message = error.response.get("Error", {}).get("Message", str(error))
        self.logger.error(f"S3 error {code} on bucket {self.bucket}: {message}")

        if code in ("AccessDenied", "403"):
            return StorageError("S3 access denied. Check IAM user permissions and bucket policy.")
        if code in ("NoSuchBucket",):
            return StorageError(f"S3 bucket not found: {self.bucket}. Check bucket name and region.")
        if code in ("NoSuchKey", "404"):
            return StorageError("Stored file not found in S3")
        if code in ("InvalidAccessKeyId", "SignatureDoesNotMatch"):
            return StorageError("Invalid AWS credentials. Check AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY.")
        return StorageError(f"S3 request failed: {message}")


def create_upload_store(config=None) -> UploadStore:
    """Pick S3 when bucket and credentials are configured, the local filesystem otherwise"""
    config = config or settings
    if config.s3_configured:
        logger.info(f"Using S3 upload store (bucket: {config.AWS_S3_BUCKET})")
        return S3UploadStore(
            bucket=config.AWS_S3_BUCKET,
            region=config.AWS_REGION,
            access_key_id=config.AWS_ACCESS_KEY_ID,
            secret_access_key=config.AWS_SECRET_ACCESS_KEY,
        )

    logger.debug(f"Using local upload store ({config.UPLOAD_DIR})")
    return LocalUploadStore(upload_dir=config.UPLOAD_DIR)
