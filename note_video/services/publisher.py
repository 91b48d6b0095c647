from __future__ import annotations

import logging
import time
from typing import Optional, Protocol, Union

from note_video.errors import StorageError
from note_video.models.api import NOTE_ID_PATTERN


class ObjectStorage(Protocol):
    def upload_bytes(self, path: str, content: bytes, content_type: str = ...) -> str: ...  # pragma: no cover


class StoragePublisher:
    def __init__(
        self,
        storage: ObjectStorage,
        prefix: str = "note-videos",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.storage = storage
        self.prefix = prefix.strip("/")
        self.log = logger or logging.getLogger(__name__)

    def video_key(self, note_id: Union[int, str, None] = None) -> str:
        if note_id is None or str(note_id).strip() == "":
            name = f"video_{int(time.time() * 1000)}"
        else:
            name = str(note_id).strip()
            if isinstance(note_id, bool) or not NOTE_ID_PATTERN.fullmatch(name):
                raise StorageError(f"invalid note id for storage key: {note_id!r}")
        return f"{self.prefix}/{name}.mp4" if self.prefix else f"{name}.mp4"

    def publish(self, key: str, data: bytes) -> str:
        self.log.info("uploading video", extra={"key": key, "size": len(data)})
        try:
            url = self.storage.upload_bytes(key, data, content_type="video/mp4")
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to upload video: {exc}") from exc
        self.log.info("video uploaded", extra={"key": key, "url": url})
        return url
