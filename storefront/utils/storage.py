# storefront/utils/storage.py
import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from storefront.config import settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

# URL prefix under which the upload directory is mounted
PUBLIC_PREFIX = "/uploads"


class InvalidImage(ValueError):
    pass


class ProductImageBucket:
    """Product image bucket backed by a local directory.

    Objects live under ``<root>/<bucket>/<name>`` and are served at
    ``/uploads/<bucket>/<name>``.
    """

    def __init__(self, root=None, bucket: str = None):
        self.root = Path(root or settings.UPLOAD_DIR)
        self.bucket = bucket or settings.PRODUCT_BUCKET
        self.path = self.root / self.bucket
        self.path.mkdir(parents=True, exist_ok=True)

    def upload(self, file: UploadFile) -> str:
        if file.content_type not in ALLOWED_CONTENT_TYPES:
            raise InvalidImage(f"Invalid file type: {file.content_type}")

        ext = (file.filename or "image").split(".")[-1]
        name = f"{uuid.uuid4()}.{ext}"
        try:
            with open(self.path / name, "wb") as buffer:
                shutil.copyfileobj(file.file, buffer)
        finally:
            file.file.close()
        logger.info("Stored product image %s/%s", self.bucket, name)
        return name

    def remove(self, name: str):
        target = self.path / name
        if target.exists():
            target.unlink()
            logger.info("Removed product image %s/%s", self.bucket, name)

    def public_url(self, name: str) -> str:
        return f"{PUBLIC_PREFIX}/{self.bucket}/{name}"

    def object_name(self, url: Optional[str]) -> Optional[str]:
        # Only URLs pointing into this bucket map back to an object
        prefix = f"{PUBLIC_PREFIX}/{self.bucket}/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None


_bucket: Optional[ProductImageBucket] = None

def get_bucket() -> ProductImageBucket:
    global _bucket
    if _bucket is None:
        _bucket = ProductImageBucket()
    return _bucket
