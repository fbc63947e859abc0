import asyncio

import pytest

from myroom.core.exceptions import AuthUnavailableError, ValidationError
from myroom.core.security import ANONYMOUS, Principal
from myroom.services.file import LocalPhotoStorage, build_photo_key
from tests.test_api_flow import API

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def storage(tmp_path):
    return LocalPhotoStorage(
        upload_dir=str(tmp_path),
        base_url="/uploads/",
        allowed_extensions=["jpg", "png"],
        max_size=1024,
        clock=lambda: 1234,
    )


def test_key_layout():
    assert build_photo_key("owner-1", "my room.jpg", 99) == "room_images/owner-1/my_room.jpg_99"
    assert build_photo_key("owner-1", "../../etc/passwd", 5) == "room_images/owner-1/passwd_5"


def test_upload_writes_file_and_returns_url(storage, tmp_path):
    key, url = asyncio.run(storage.upload_listing_photo(Principal(user_id="owner-1"), "room.png", PNG_BYTES))

    assert key == "room_images/owner-1/room.png_1234"
    assert url == f"/uploads/{key}"
    assert (tmp_path / key).read_bytes() == PNG_BYTES


def test_upload_requires_identity(storage):
    with pytest.raises(AuthUnavailableError) as exc_info:
        asyncio.run(storage.upload_listing_photo(ANONYMOUS, "room.png", PNG_BYTES))
    assert exc_info.value.message == "Cannot upload image: Authentication required."


@pytest.mark.parametrize(
    "filename,data",
    [(None, PNG_BYTES), ("notes.txt", PNG_BYTES), ("room.png", b""), ("room.png", b"x" * 2048)],
)
def test_rejected_uploads(storage, filename, data):
    with pytest.raises(ValidationError):
        storage.validate(filename, len(data))


def test_upload_endpoint(client, owner_headers):
    response = client.post(
        f"{API}/owner/photos",
        files={"file": ("room.png", PNG_BYTES, "image/png")},
        headers=owner_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["key"].startswith("room_images/owner-1/room.png_")

    served = client.get(body["url"])
    assert served.status_code == 200
    assert served.content == PNG_BYTES


def test_upload_endpoint_rejects_other_types(client, owner_headers):
    response = client.post(
        f"{API}/owner/photos",
        files={"file": ("room.exe", b"MZ", "application/octet-stream")},
        headers=owner_headers,
    )
    assert response.status_code == 422


def test_upload_endpoint_needs_identity(client):
    response = client.post(f"{API}/owner/photos", files={"file": ("room.png", PNG_BYTES, "image/png")})
    assert response.status_code == 401


def test_upload_endpoint_reads_only_past_the_limit(client, app, owner_headers, monkeypatch):
    storage = app.state.photo_storage
    monkeypatch.setattr(storage, "max_size", 16)
    seen_sizes = []
    original_validate = storage.validate

    def recording_validate(filename, size):
        seen_sizes.append(size)
        return original_validate(filename, size)

    monkeypatch.setattr(storage, "validate", recording_validate)

    response = client.post(
        f"{API}/owner/photos",
        files={"file": ("room.png", b"x" * 64, "image/png")},
        headers=owner_headers,
    )
    assert response.status_code == 422
    assert seen_sizes == [17]
