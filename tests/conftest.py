"""
Test fixtures for the asset uploader.
"""
import json
import os
import threading
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from asset_uploader.config import UploadConfig
from asset_uploader.control_plane import ControlPlaneClient
from asset_uploader.coordinator import UploadOrchestrator
from asset_uploader.models import FileMetadata
from asset_uploader.uploader import PartUploader

BASE_URL = "https://control.test/api/v1/"
STORAGE_URL = "https://storage.test/bucket/asset.bin"


def make_file(size: int, name: str = "cat.jpg", mime_type: str = "image/jpeg") -> FileMetadata:
    """Create an in-memory file with random content."""
    return FileMetadata(name=name, size=size, mime_type=mime_type, content=os.urandom(size))


def part_entries(*bounds: int) -> List[dict]:
    """Build signed-URL part entries from consecutive boundaries.

    ``part_entries(0, 5, 9)`` gives parts [0, 5) and [5, 9).
    """
    return [
        {
            "part": number,
            "start": start,
            "end": end,
            "url": f"{STORAGE_URL}?partNumber={number}&uploadId=upload-1",
        }
        for number, (start, end) in enumerate(zip(bounds, bounds[1:]), start=1)
    ]


class FakeControlPlane:
    """Stands in for the signed-URL and completion endpoints."""

    def __init__(self, urls: Optional[List[dict]] = None, asset_id="asset-1",
                 upload_id="upload-1"):
        self.signed_response = {"id": asset_id, "upload_id": upload_id, "urls": urls or []}
        self.signed_status = 200
        self.completion_status = 200
        self.signed_requests: List[httpx.Request] = []
        self.completion_requests: List[httpx.Request] = []

    @property
    def completion_bodies(self) -> List[dict]:
        return [json.loads(r.content) for r in self.completion_requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path.endswith("/assets/signed"):
            self.signed_requests.append(request)
            return httpx.Response(self.signed_status, json=self.signed_response)
        if request.method == "POST" and request.url.path.endswith("/uploaded"):
            self.completion_requests.append(request)
            if self.completion_status != 200:
                return httpx.Response(self.completion_status, text="upload id not found")
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(404)


class FakeStorage:
    """Stands in for the storage backend receiving presigned part PUTs."""

    def __init__(self):
        self.requests: Dict[int, httpx.Request] = {}
        self.failures: Dict[int, httpx.Response] = {}
        self.before_response: Optional[Callable[[int], None]] = None
        self.completed: Dict[int, threading.Event] = {}
        self._lock = threading.Lock()

    def fail_part(self, part_number: int, status: int = 400,
                  body: str = "<Error><Code>SignatureDoesNotMatch</Code></Error>") -> None:
        self.failures[part_number] = httpx.Response(status, text=body)

    def event(self, part_number: int) -> threading.Event:
        with self._lock:
            return self.completed.setdefault(part_number, threading.Event())

    def handler(self, request: httpx.Request) -> httpx.Response:
        part_number = int(request.url.params["partNumber"])
        with self._lock:
            self.requests[part_number] = request
        try:
            if self.before_response:
                self.before_response(part_number)
            if part_number in self.failures:
                return self.failures[part_number]
            return httpx.Response(200, headers={"ETag": f'"e{part_number}"'})
        finally:
            self.event(part_number).set()


@pytest.fixture
def config():
    """Create a test configuration."""
    return UploadConfig(
        access_token="test-token",
        base_url=BASE_URL,
        max_concurrency=4,
        part_timeout=5.0,
    )


@pytest.fixture
def control_plane():
    return FakeControlPlane()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def control_plane_client(config, control_plane):
    client = ControlPlaneClient(
        config, client=httpx.Client(transport=httpx.MockTransport(control_plane.handler))
    )
    yield client
    client.close()


@pytest.fixture
def part_uploader(storage):
    uploader = PartUploader(
        client=httpx.Client(transport=httpx.MockTransport(storage.handler)),
        timeout=5.0,
    )
    yield uploader
    uploader.close()


@pytest.fixture
def orchestrator(config, control_plane_client, part_uploader):
    """Create an orchestrator wired to the fake control plane and storage."""
    return UploadOrchestrator(
        config,
        control_plane=control_plane_client,
        uploader=part_uploader,
    )
