import inspect
from pathlib import Path

from civic_tracker.routers.uploads import upload_photo


def test_upload_photo_and_attach(client, settings, citizen_headers):
    response = client.post(
        "/upload",
        files={"photo": ("pothole.png", b"\x89PNG fake bytes", "image/png")},
        headers=citizen_headers,
    )

    assert response.status_code == 200
    ref = response.json()
    assert ref["ok"] is True
    assert ref["mime"] == "image/png"
    assert ref["size"] == len(b"\x89PNG fake bytes")
    assert ref["filename"].endswith(".png")
    assert ref["url"] == f"/uploads/{ref['filename']}"
    assert (Path(settings.upload_dir) / ref["filename"]).read_bytes() == b"\x89PNG fake bytes"

    served = client.get(ref["url"])
    assert served.status_code == 200
    assert served.content == b"\x89PNG fake bytes"

    issue = client.post(
        "/issues",
        json={"category": "Pothole", "coords": {"lat": 12.9, "lng": 77.6}, "attachments": [ref]},
        headers=citizen_headers,
    ).json()
    detail = client.get(f"/issues/{issue['id']}", headers=citizen_headers).json()
    assert detail["attachments"][0]["url"] == ref["url"]


def test_upload_rejects_other_types(client, citizen_headers):
    response = client.post(
        "/upload",
        files={"photo": ("notes.txt", b"hello", "text/plain")},
        headers=citizen_headers,
    )
    assert response.status_code == 415


def test_upload_rejects_large_files(client, settings, citizen_headers):
    too_big = b"0" * (settings.max_upload_bytes + 1)
    response = client.post(
        "/upload",
        files={"photo": ("big.jpg", too_big, "image/jpeg")},
        headers=citizen_headers,
    )
    assert response.status_code == 413


def test_upload_requires_credentials(client):
    response = client.post("/upload", files={"photo": ("a.jpg", b"x", "image/jpeg")})
    assert response.status_code == 401


def test_upload_handler_runs_in_threadpool():
    # sync handlers are dispatched to FastAPI's threadpool, off the event loop
    assert not inspect.iscoroutinefunction(upload_photo)
