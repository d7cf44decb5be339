"""
Stockage des fichiers uploadés (images des blocs, fichiers de livraison).

Ecrit sous UPLOADS_DIR et renvoie une URL publique servie par le mount /uploads.
Les validateurs tournent AVANT tout upload.
"""

import logging
import re
import time
from pathlib import Path
from typing import Callable, Optional
from app.core.config import settings
from app.core.errors import CollaboratorError, UploadRejected

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256 * 1024

ProgressCallback = Callable[[int, int], None]

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


# ============ VALIDATION ============

def validate_image(content_type: Optional[str], size: int, max_bytes: Optional[int] = None) -> None:
    limit = max_bytes or settings.MAX_IMAGE_BYTES
    if not content_type or not content_type.startswith("image/"):
        raise UploadRejected("Please select an image file")
    if size > limit:
        raise UploadRejected(f"Image must be less than {limit // (1024 * 1024)}MB")


def validate_file(size: int, max_bytes: Optional[int] = None) -> None:
    limit = max_bytes or settings.MAX_FILE_BYTES
    if size > limit:
        raise UploadRejected(f"File is too large (max {limit // (1024 * 1024)}MB)")


def safe_filename(name: str) -> str:
    cleaned = _UNSAFE_NAME.sub("_", Path(name or "file").name).strip("._")
    return cleaned or "file"


def content_image_path(owner_id: int, filename: str) -> str:
    return f"users/{owner_id}/content-images/{int(time.time() * 1000)}_{safe_filename(filename)}"


def delivery_file_path(owner_id: int, product_id: str, filename: str) -> str:
    return f"users/{owner_id}/delivery-files/{product_id}/{int(time.time() * 1000)}_{safe_filename(filename)}"


# ============ STORE ============

class BlobStore:
    def __init__(self, root: Optional[str] = None, base_url: Optional[str] = None):
        self.root = Path(root or settings.UPLOADS_DIR)
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")

    def _target(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise UploadRejected(f"Invalid storage path: {path}")
        return target

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/uploads/{path}"

    def path_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.base_url}/uploads/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    def upload(self, path: str, data: bytes, on_progress: Optional[ProgressCallback] = None) -> str:
        """Ecrit par morceaux en signalant (transféré, total), renvoie l'URL de téléchargement"""
        target = self._target(path)
        total = len(data)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as f:
                transferred = 0
                for start in range(0, total, CHUNK_SIZE):
                    chunk = data[start:start + CHUNK_SIZE]
                    f.write(chunk)
                    transferred += len(chunk)
                    if on_progress:
                        on_progress(transferred, total)
        except OSError as e:
            logger.error(f"Upload failed for {path}: {e}")
            raise CollaboratorError(f"Upload failed: {e}") from e

        if total == 0 and on_progress:
            on_progress(0, 0)

        logger.info(f"Uploaded {path} ({total} bytes)")
        return self.url_for(path)

    def delete(self, path: str) -> bool:
        target = self._target(path)
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError as e:
            logger.error(f"Delete failed for {path}: {e}")
            raise CollaboratorError(f"Delete failed: {e}") from e
        return True


def get_blob_store() -> BlobStore:
    """Dépendance FastAPI"""
    return BlobStore()
