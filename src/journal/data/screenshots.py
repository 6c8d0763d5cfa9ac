"""Screenshot object storage: abstract contract and local-directory implementation.

Objects are addressed by path {user_id}/{trade_id}/{before|after}.{ext}.
An upload returns the public URL of the stored object, or None when the
upload failed. Upload failures never raise: a trade is saved without its
screenshot rather than not at all.
"""

import asyncio
import os
from abc import ABC, abstractmethod

from journal.logging import get_logger

logger = get_logger(__name__)

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
}


def screenshot_extension(filename: str | None, content_type: str | None) -> str:
    """File extension for an uploaded image, from its name or content type."""
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].lower()
        if ext.isalnum():
            return ext
    return _EXTENSIONS.get((content_type or "").lower(), "png")


def screenshot_path(user_id: str, trade_id: str, kind: str, ext: str) -> str:
    """Object path for one of a trade's screenshots.

    Args:
        kind: "before" or "after".
    """
    if kind not in ("before", "after"):
        raise ValueError(f"Unknown screenshot kind: {kind!r}")
    return f"{user_id}/{trade_id}/{kind}.{ext}"


class ScreenshotStore(ABC):
    """Abstract object store for trade screenshots."""

    @abstractmethod
    async def upload_screenshot(
        self,
        content: bytes,
        path: str,
        content_type: str | None = None,
    ) -> str | None:
        """Store content at path, replacing any existing object.

        Returns:
            Public URL of the stored object, or None if the upload failed.
        """
        ...


class LocalScreenshotStore(ScreenshotStore):
    """ScreenshotStore writing into a local directory served at base_url.

    Args:
        root_dir: Directory that receives the files.
        base_url: Public URL prefix the directory is served under.
    """

    def __init__(self, root_dir: str, base_url: str = "/screenshots") -> None:
        self._root_dir = os.path.abspath(root_dir)
        self._base_url = base_url.rstrip("/")

    @property
    def root_dir(self) -> str:
        return self._root_dir

    def _target(self, path: str) -> str:
        target = os.path.abspath(os.path.join(self._root_dir, path))
        if os.path.commonpath([self._root_dir, target]) != self._root_dir:
            raise ValueError(f"Screenshot path escapes storage root: {path!r}")
        return target

    def _write(self, target: str, content: bytes) -> None:
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)

    async def upload_screenshot(
        self,
        content: bytes,
        path: str,
        content_type: str | None = None,
    ) -> str | None:
        try:
            target = self._target(path)
            await asyncio.to_thread(self._write, target, content)
        except (OSError, ValueError) as e:
            logger.error("screenshot_upload_failed", path=path, error=str(e))
            return None

        logger.info(
            "screenshot_uploaded",
            path=path,
            size=len(content),
            content_type=content_type,
        )
        return f"{self._base_url}/{path}"
