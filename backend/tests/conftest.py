import io
import os
import tempfile

os.environ.setdefault("FACE_REC_API_URL", "http://face-rec.test/")
os.environ.setdefault("CORS_ORIGIN", "http://portal.test")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "face_portal_test_logs"))

import httpx
import pytest
from PIL import Image

from face_portal.main import app
from face_portal.services.upstream import UpstreamClient
from face_portal.utils.auth import get_upstream
from face_portal.utils.config import settings


class FakeUpstream:
    """Stand-in for the face recognition API, recording every call it receives."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, reply):
        # reply is an httpx.Response, or a callable taking the request
        self.routes[(method, path)] = reply

    def calls(self, method=None, prefix=""):
        return [
            request for request in self.requests
            if (method is None or request.method == method) and request.url.path.startswith(prefix)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.routes.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(reply):
            return reply(request)
        return reply

    def client(self) -> UpstreamClient:
        return UpstreamClient(settings, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_upstream():
    fake = FakeUpstream()
    upstream = fake.client()
    app.dependency_overrides[get_upstream] = lambda: upstream
    yield fake
    app.dependency_overrides.pop(get_upstream, None)


@pytest.fixture
def image_file():
    """Create a test image"""
    img = Image.new('RGB', (64, 48), color='red')
    img_bytes = io.BytesIO()
    img.save(img_bytes, format='JPEG')
    img_bytes.seek(0)
    return img_bytes
