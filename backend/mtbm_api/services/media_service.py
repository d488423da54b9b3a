"""Media Service - Validation and storage of uploaded images and voice notes"""
import mimetypes
import os
from typing import NamedTuple, Optional, Tuple

from fastapi import UploadFile

from ..config.settings import Settings
from ..domain.enums import MediaKind
from ..domain.errors import AttachmentTooLargeError, InvalidMimeTypeError, ValidationError
from ..utils.idgen import generate_media_filename
from ..utils.logger import get_logger

logger = get_logger(__name__)

PUBLIC_PREFIX = "/uploads"


class MediaRule(NamedTuple):
    """Accepted types and size ceiling for one kind of upload"""
    mime_prefixes: Tuple[str, ...]
    mime_exact: Tuple[str, ...]
    max_mb: int
    type_message: str


class StoredMedia(NamedTuple):
    path: str          # public path, e.g. /uploads/chat/<file>
    size_bytes: int
    mime_type: str


class MediaService:
    """Service for uploaded media"""

    CHAT_FOLDER = "chat"
    ADMIN_CHAT_FOLDER = "admin-chat"
    AVATAR_FOLDER = "avatars"

    def __init__(self, settings: Settings):
        self.base_path = settings.uploads_path
        self.rules = {
            MediaKind.AVATAR: MediaRule(
                ("image/",), (), settings.avatar_max_mb,
                "Only image uploads are allowed",
            ),
            MediaKind.CHAT_IMAGE: MediaRule(
                ("image/",), (), settings.chat_image_max_mb,
                "Only image files are allowed",
            ),
            MediaKind.CHAT_VOICE: MediaRule(
                ("audio/",), ("video/webm", "application/ogg"), settings.chat_voice_max_mb,
                "Only audio files are allowed",
            ),
        }

    def validate_mime(self, kind: MediaKind, content_type: Optional[str]) -> str:
        """
        Raises:
            InvalidMimeTypeError: If the declared type is not accepted for kind
        """
        rule = self.rules[kind]
        mime = (content_type or "").split(";")[0].strip().lower()
        if mime.startswith(rule.mime_prefixes) or mime in rule.mime_exact:
            return mime
        raise InvalidMimeTypeError(
            rule.type_message,
            details={"mime_type": mime or None, "kind": kind.value}
        )

    def read_bounded(self, kind: MediaKind, upload: UploadFile) -> bytes:
        """
        Read the upload, refusing anything over the kind's ceiling

        Raises:
            AttachmentTooLargeError: File exceeds the ceiling
            ValidationError: File is empty
        """
        rule = self.rules[kind]
        max_bytes = Settings.megabytes(rule.max_mb)
        content = upload.file.read(max_bytes + 1)
        if len(content) > max_bytes:
            raise AttachmentTooLargeError(
                f"File exceeds maximum size of {rule.max_mb}MB",
                details={"max_bytes": max_bytes, "kind": kind.value}
            )
        if not content:
            raise ValidationError("No file uploaded")
        return content

    def _extension(self, filename: Optional[str], mime: str) -> str:
        ext = os.path.splitext(filename or "")[1].lower()
        if not ext:
            ext = mimetypes.guess_extension(mime) or ""
        return ext

    def store(self, upload: UploadFile, kind: MediaKind, folder: str) -> StoredMedia:
        """
        Validate then write an upload under uploads/<folder>/

        Nothing is written unless type and size checks pass.
        """
        mime = self.validate_mime(kind, upload.content_type)
        content = self.read_bounded(kind, upload)

        filename = generate_media_filename(self._extension(upload.filename, mime))
        storage_dir = os.path.join(self.base_path, folder)
        os.makedirs(storage_dir, exist_ok=True)
        storage_path = os.path.join(storage_dir, filename)

        try:
            with open(storage_path, "wb") as f:
                f.write(content)
        except OSError:
            if os.path.exists(storage_path):
                os.remove(storage_path)
            raise

        public_path = f"{PUBLIC_PREFIX}/{folder}/{filename}"
        logger.info(
            f"Stored {kind.value} upload {public_path}",
            extra={"action": "media_stored"}
        )
        return StoredMedia(path=public_path, size_bytes=len(content), mime_type=mime)

    def delete(self, public_path: Optional[str]) -> bool:
        """Best-effort removal of a stored file by its public path"""
        if not public_path or not public_path.startswith(PUBLIC_PREFIX + "/"):
            return False

        relative = public_path[len(PUBLIC_PREFIX) + 1:]
        base = os.path.realpath(self.base_path)
        target = os.path.realpath(os.path.join(base, relative))
        if not target.startswith(base + os.sep):
            return False

        try:
            os.remove(target)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not delete media {public_path}: {e}")
            return False
