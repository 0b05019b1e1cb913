# tribalart/utils/images.py
import io
import os
from pathlib import Path
from typing import Optional
from PIL import Image, UnidentifiedImageError

from tribalart.config import settings

# safe image extensions we allow
ALLOWED_EXT = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


class StorageError(Exception):
    pass


def _safe_ext(filename: str) -> str:
    _, ext = os.path.splitext(filename or "")
    return ext.lower()


def validate_image(filename: str, contents: bytes, content_type: Optional[str] = None,
                   max_bytes: Optional[int] = None) -> Optional[str]:
    """
    Return a user-facing error for a file that must not be uploaded, else None.
    Checks the file extension, the size limit, the declared content type and
    that PIL can parse it.
    """
    limit = settings.MAX_IMAGE_BYTES if max_bytes is None else max_bytes
    ext = _safe_ext(filename)
    # no extension is stored as .jpg
    if ext and ext not in ALLOWED_EXT:
        return f"{filename} must be a JPG, PNG, WEBP or GIF image"
    if len(contents) > limit:
        return f"{filename} is larger than {limit // (1024 * 1024)}MB"
    if content_type and not content_type.startswith("image/"):
        return f"{filename} is not an image"
    try:
        Image.open(io.BytesIO(contents)).verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        return f"{filename} is not an image"
    return None


class ImageBucket:
    """
    Public object-storage bucket backed by a directory: upload(path, bytes) stores a
    file under <base_dir>/<bucket>/ and get_public_url(path) maps it to a URL.
    """

    def __init__(self, name: str = "images", base_dir: Optional[Path] = None, base_url: Optional[str] = None):
        self.name = name
        self.base_dir = Path(base_dir or settings.IMAGE_DIR)
        self.base_url = (base_url if base_url is not None else settings.PUBLIC_BASE_URL).rstrip("/")

    @property
    def root(self) -> Path:
        return self.base_dir / self.name

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise StorageError(f"Invalid object path: {path}")
        return target

    def upload(self, path: str, contents: bytes) -> str:
        if _safe_ext(path) not in ALLOWED_EXT:
            raise StorageError(f"Unsupported file type: {path}")
        target = self._resolve(path)
        if target.exists():
            raise StorageError("The resource already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as f:
                f.write(contents)
        except OSError as e:
            raise StorageError(str(e)) from e
        return path

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/{self.name}/{path}"

    def remove(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError:
            return False
        return True
