"""
Storage for uploaded profile media (images and videos).

Files are named ``<form field>-<epoch millis><original extension>``. The value
returned by ``upload_file`` is what gets stored on the profile row: a path
under the ``/uploads`` mount for local storage, or a public URL for GCS.
"""
import os
import time
import shutil
import logging
from typing import Union, BinaryIO
from pathlib import Path
from google.cloud import storage
from google.cloud.exceptions import NotFound
from portal.core.config import Settings

logger = logging.getLogger(__name__)


def generate_filename(field_name: str, original_filename: str) -> str:
    """Build a stored filename from the form field, a timestamp and the extension."""
    extension = Path(original_filename or "").suffix
    return f"{field_name}-{int(time.time() * 1000)}{extension}"


class GCSStorageService:
    """Service for storing uploads in Google Cloud Storage."""

    def __init__(self, settings: Settings):
        self.bucket_name = settings.GCS_BUCKET_NAME
        self.client = None
        self.bucket = None

        if self.bucket_name:
            try:
                if settings.GCS_CREDENTIALS_PATH and os.path.exists(settings.GCS_CREDENTIALS_PATH):
                    self.client = storage.Client.from_service_account_json(settings.GCS_CREDENTIALS_PATH)
                else:
                    # Use default credentials (for Cloud Run, this will work automatically)
                    self.client = storage.Client(project=settings.GCP_PROJECT_ID or None)

                self.bucket = self.client.bucket(self.bucket_name)
                logger.info(f"GCS Storage service initialized for bucket: {self.bucket_name}")
            except Exception as e:
                logger.warning(f"Failed to initialize GCS client: {e}")
                self.client = None
                self.bucket = None
        else:
            logger.info("GCS_BUCKET_NAME not configured, uploads will use local storage")

    def is_available(self) -> bool:
        """Check if GCS is properly configured and available."""
        return self.client is not None and self.bucket is not None

    async def upload_file(
        self,
        file_content: Union[bytes, BinaryIO],
        field_name: str,
        filename: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        Upload a file to Google Cloud Storage.

        Returns:
            The public URL of the stored object
        """
        if not self.is_available():
            raise RuntimeError("Google Cloud Storage is not properly configured")

        gcs_path = f"uploads/{generate_filename(field_name, filename)}"

        try:
            blob = self.bucket.blob(gcs_path)

            # Handle both bytes and file-like objects
            if isinstance(file_content, bytes):
                blob.upload_from_string(file_content, content_type=content_type)
            else:
                blob.upload_from_file(file_content, content_type=content_type)

            logger.info(f"Successfully uploaded file to GCS: {gcs_path}")
            return blob.public_url

        except Exception as e:
            logger.error(f"Failed to upload file to GCS: {e}")
            raise RuntimeError(f"File upload failed: {e}")

    async def delete_file(self, stored_path: str) -> bool:
        """Delete an object given the URL returned by ``upload_file``."""
        if not self.is_available():
            return False

        prefix = f"https://storage.googleapis.com/{self.bucket_name}/"
        gcs_path = stored_path[len(prefix):] if stored_path.startswith(prefix) else stored_path

        try:
            self.bucket.blob(gcs_path).delete()
            logger.info(f"Successfully deleted file from GCS: {gcs_path}")
            return True

        except NotFound:
            logger.warning(f"File not found for deletion in GCS: {gcs_path}")
            return False
        except Exception as e:
            logger.error(f"Failed to delete file from GCS: {e}")
            return False


class LocalStorageService:
    """Stores uploads on local disk, served from the ``/uploads`` mount."""

    def __init__(self, settings: Settings):
        self.upload_dir = Path(settings.UPLOAD_DIR)
        self.url_prefix = settings.UPLOAD_URL_PREFIX.rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Local storage service initialized: {self.upload_dir}")

    def is_available(self) -> bool:
        """Local storage is always available."""
        return True

    def local_path(self, stored_path: str) -> Path:
        return self.upload_dir / Path(stored_path).name

    async def upload_file(
        self,
        file_content: Union[bytes, BinaryIO],
        field_name: str,
        filename: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Save file to local filesystem and return its ``/uploads/...`` path."""
        unique_filename = generate_filename(field_name, filename)
        local_path = self.upload_dir / unique_filename

        try:
            with open(local_path, "wb") as f:
                if isinstance(file_content, bytes):
                    f.write(file_content)
                else:
                    shutil.copyfileobj(file_content, f)

            logger.info(f"Successfully saved file locally: {local_path}")
            return f"{self.url_prefix}/{unique_filename}"

        except Exception as e:
            logger.error(f"Failed to save file locally: {e}")
            raise RuntimeError(f"Local file save failed: {e}")

    async def delete_file(self, stored_path: str) -> bool:
        """Delete file from local filesystem."""
        file_path = self.local_path(stored_path)
        try:
            file_path.unlink()
            logger.info(f"Successfully deleted local file: {file_path}")
            return True
        except FileNotFoundError:
            logger.warning(f"Local file not found for deletion: {file_path}")
            return False
        except Exception as e:
            logger.error(f"Failed to delete local file: {e}")
            return False


def create_storage_service(settings: Settings):
    """Pick GCS when a bucket is configured and reachable, local disk otherwise."""
    gcs_service = GCSStorageService(settings)
    if gcs_service.is_available():
        return gcs_service

    if settings.GCS_BUCKET_NAME:
        logger.warning("Using local storage fallback - not suitable for production")
    return LocalStorageService(settings)
