import re

import httpx
import pytest

from note_video.clients.supabase_storage import SupabaseStorageClient
from note_video.errors import StorageError
from note_video.services.publisher import StoragePublisher


def recording_storage(requests, status_code=200, text='{"Key": "ok"}') -> SupabaseStorageClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, text=text)

    return SupabaseStorageClient(
        api_url="https://proj.supabase.co",
        bucket="videos",
        api_key="service-role",
        transport=httpx.MockTransport(handler),
    )


def test_video_key_uses_note_id():
    publisher = StoragePublisher(recording_storage([]))
    assert publisher.video_key(42) == "note-videos/42.mp4"
    assert publisher.video_key("note_7-b") == "note-videos/note_7-b.mp4"


def test_video_key_without_note_id_is_timestamped():
    publisher = StoragePublisher(recording_storage([]))
    assert re.fullmatch(r"note-videos/video_\d+\.mp4", publisher.video_key(None))


@pytest.mark.parametrize(
    "note_id",
    ["../../bucket/other-bucket/evil", "a/b", "a\\b", "..", "note 1", True],
)
def test_video_key_rejects_ids_that_escape_the_prefix(note_id):
    requests = []
    publisher = StoragePublisher(recording_storage(requests))

    with pytest.raises(StorageError, match="invalid note id"):
        publisher.video_key(note_id)
    assert requests == []


def test_upload_upserts_and_returns_public_url():
    requests = []
    publisher = StoragePublisher(recording_storage(requests))

    url = publisher.publish("note-videos/42.mp4", b"video")

    assert url == "https://proj.supabase.co/storage/v1/object/public/videos/note-videos/42.mp4"
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://proj.supabase.co/storage/v1/object/videos/note-videos/42.mp4"
    assert request.headers["x-upsert"] == "true"
    assert request.headers["content-type"] == "video/mp4"
    assert request.headers["authorization"] == "Bearer service-role"
    assert request.headers["apikey"] == "service-role"


def test_publishing_same_key_overwrites():
    requests = []
    publisher = StoragePublisher(recording_storage(requests))
    key = publisher.video_key(7)

    first = publisher.publish(key, b"old video")
    second = publisher.publish(key, b"new video")

    assert first == second
    assert [str(r.url) for r in requests] == [
        "https://proj.supabase.co/storage/v1/object/videos/note-videos/7.mp4",
    ] * 2
    assert all(r.headers["x-upsert"] == "true" for r in requests)
    assert requests[-1].content == b"new video"


def test_custom_public_url_base():
    storage = SupabaseStorageClient(
        api_url="https://proj.supabase.co",
        bucket="videos",
        api_key="service-role",
        public_url="https://cdn.example.com",
        transport=httpx.MockTransport(lambda request: httpx.Response(200)),
    )
    assert storage.upload_bytes("note-videos/1.mp4", b"v") == "https://cdn.example.com/videos/note-videos/1.mp4"


def test_rejected_upload_raises_storage_error():
    storage = recording_storage([], status_code=403, text="new row violates policy")
    with pytest.raises(StorageError, match="403"):
        StoragePublisher(storage).publish("note-videos/1.mp4", b"video")


def test_unconfigured_storage_refuses_to_upload():
    storage = SupabaseStorageClient(api_url="", bucket="videos", api_key="")
    with pytest.raises(StorageError, match="not configured"):
        StoragePublisher(storage).publish("note-videos/1.mp4", b"video")


def test_transport_failure_raises_storage_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection reset", request=request)

    storage = SupabaseStorageClient(
        api_url="https://proj.supabase.co",
        bucket="videos",
        api_key="service-role",
        transport=httpx.MockTransport(handler),
    )
    with pytest.raises(StorageError, match="connection reset"):
        storage.upload_bytes("note-videos/1.mp4", b"video")


def test_unexpected_backend_error_is_wrapped():
    class Broken:
        def upload_bytes(self, path, content, content_type="application/octet-stream"):
            raise RuntimeError("socket closed")

    with pytest.raises(StorageError, match="socket closed"):
        StoragePublisher(Broken()).publish("note-videos/1.mp4", b"video")
