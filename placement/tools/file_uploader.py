import asyncio
import logging
from io import BytesIO

import cloudinary
import cloudinary.uploader
import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from placement.core.config import get_settings
from placement.core.errors import UploadFailed
from placement.schemas.AnalysisSchemas import StoredFile

logger = logging.getLogger(__name__)


def configure_cloudinary():
    """Configures the Cloudinary client with credentials from settings."""
    settings = get_settings()
    missing = [k for k, v in {
        "CLOUDINARY_CLOUD_NAME": settings.CLOUDINARY_CLOUD_NAME,
        "CLOUDINARY_API_KEY": settings.CLOUDINARY_API_KEY,
        "CLOUDINARY_API_SECRET": settings.CLOUDINARY_API_SECRET,
    }.items() if not v]
    if missing:
        logger.warning("Cloudinary config missing vars: %s. Uploads will likely fail.", missing)

    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


class CloudinaryStorage:
    """Object storage for resume files and generated PDFs."""

    def __init__(self):
        configure_cloudinary()

    def _upload_sync(self, content: bytes, path: str) -> StoredFile:
        result = cloudinary.uploader.upload(
            BytesIO(content),
            public_id=path,
            resource_type="raw",
            overwrite=True,
        )
        url = result.get("secure_url")
        if not url:
            raise UploadFailed("Storage did not return a download URL")
        return StoredFile(fileId=result.get("public_id") or path, path=path, downloadUrl=url)

    async def upload(self, content: bytes, path: str) -> StoredFile:
        try:
            stored = await asyncio.to_thread(self._upload_sync, content, path)
        except UploadFailed:
            raise
        except Exception as e:
            logger.exception("Cloudinary upload failed for %s", path)
            raise UploadFailed(f"Failed to upload file: {e}")
        logger.info("File successfully uploaded to %s", stored.path)
        return stored


def _is_retryable_error(exc: BaseException) -> bool:
    """Retry timeouts, connection errors and 5xx responses; give up on 4xx."""
    if isinstance(exc, (requests.Timeout, requests.ConnectionError)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code >= 500
    return False


class HttpFetcher:
    """Downloads stored files, retrying with exponential backoff (1s, 2s, 4s)."""

    def __init__(self, timeout: float = None, max_attempts: int = None):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self.max_attempts = max_attempts if max_attempts is not None else settings.FETCH_MAX_ATTEMPTS

    def _get_sync(self, url: str) -> bytes:
        r = requests.get(url, timeout=self.timeout)
        r.raise_for_status()
        return r.content

    def fetch_sync(self, url: str) -> bytes:
        fetch = retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            retry=retry_if_exception(_is_retryable_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )(self._get_sync)
        return fetch(url)

    async def fetch(self, url: str) -> bytes:
        return await asyncio.to_thread(self.fetch_sync, url)
