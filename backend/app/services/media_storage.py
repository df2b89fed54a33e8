"""Local storage for uploaded avatar and cover images."""
import logging
import shutil
import uuid
from pathlib import Path

from fastapi import UploadFile

from app.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


class MediaStorage:
    """Saves uploads under a directory served at ``url_prefix``."""

    def __init__(self, media_dir: Path, url_prefix: str = "/media"):
        self.media_dir = Path(media_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def check_image(self, upload: UploadFile) -> str:
        """Return the upload's lowercased extension, or raise ValidationError if it is not an image."""
        extension = Path(upload.filename).suffix.lower()
        if extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(f"Unsupported image type: {extension or upload.filename}")
        return extension

    def save(self, upload: UploadFile | None) -> str | None:
        """Store an uploaded image and return its public URL.

        Returns None when there is nothing to store or the write fails.
        Raises ValidationError for files that are not images.
        """
        if upload is None or not upload.filename:
            return None

        extension = self.check_image(upload)
        stored_name = f"{uuid.uuid4().hex}{extension}"
        destination = self.media_dir / stored_name
        try:
            self.media_dir.mkdir(parents=True, exist_ok=True)
            upload.file.seek(0)
            with open(destination, "wb") as f:
                shutil.copyfileobj(upload.file, f)
        except OSError as e:
            logger.error(f"Failed to store upload {upload.filename}: {e}")
            destination.unlink(missing_ok=True)
            return None

        logger.debug(f"Stored upload {upload.filename} as {stored_name}")
        return f"{self.url_prefix}/{stored_name}"

    def delete(self, url: str | None) -> None:
        """Remove a previously stored file; URLs not issued by this storage are ignored."""
        if not url or not url.startswith(f"{self.url_prefix}/"):
            return
        name = url[len(self.url_prefix) + 1:]
        if Path(name).name != name or name.startswith("."):
            return
        try:
            (self.media_dir / name).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove replaced upload {name}: {e}")
