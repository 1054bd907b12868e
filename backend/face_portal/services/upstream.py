import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from face_portal.exceptions import UpstreamTimeoutError, UpstreamUnavailableError
from face_portal.utils.config import Settings

logger = logging.getLogger(__name__)

RELAYED_HEADERS = ("Result", "X-Response-Type", "X-Response-Text")


class ImagePayload:
    """An uploaded image held in memory until it is forwarded upstream."""

    def __init__(self, content: bytes, filename: Optional[str], content_type: Optional[str]):
        self.content = content
        self.filename = filename or "image.jpg"
        self.content_type = content_type or "application/octet-stream"

    def as_file(self):
        return ("image", (self.filename, self.content, self.content_type))


def relay_headers(response: httpx.Response) -> Dict[str, str]:
    """Pick the custom result headers that must be passed back to the caller."""
    return {
        name: response.headers[name]
        for name in RELAYED_HEADERS
        if response.headers.get(name)
    }


def parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class UpstreamClient:

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.FACE_REC_API_URL,
            timeout=settings.REQUEST_TIMEOUT,
            follow_redirects=True,
            transport=transport,
        )

    async def close(self):
        await self._client.aclose()

    @staticmethod
    def _auth(uid: str) -> Dict[str, str]:
        return {"Authentication": uid}

    async def _send(self, request: httpx.Request, stream: bool = False) -> httpx.Response:
        try:
            return await self._client.send(request, stream=stream)
        except httpx.TimeoutException as e:
            logger.error(f"Upstream timeout for {request.method} {request.url}: {str(e)}")
            raise UpstreamTimeoutError(
                "Connection to backend API timed out", details=str(e) or None
            ) from e
        except httpx.TransportError as e:
            logger.error(f"Upstream unreachable for {request.method} {request.url}: {str(e)}")
            raise UpstreamUnavailableError(
                "Could not connect to backend API (no response)", details=str(e) or None
            ) from e

    async def register(self, uid: str, name: str, image: ImagePayload) -> httpx.Response:
        request = self._client.build_request(
            "POST",
            "/register",
            data={"name": name},
            files=[image.as_file()],
            headers=self._auth(uid),
            timeout=self.settings.REQUEST_TIMEOUT,
        )
        return await self._send(request)

    async def recognize(self, uid: str, image: ImagePayload) -> httpx.Response:
        """Open a streamed recognition call. The caller must close the response."""
        request = self._client.build_request(
            "POST",
            "/recognize",
            files=[image.as_file()],
            headers=self._auth(uid),
            timeout=self.settings.RECOGNIZE_TIMEOUT,
        )
        return await self._send(request, stream=True)

    async def list_faces(self, uid: str) -> httpx.Response:
        request = self._client.build_request(
            "GET",
            "/faces/list",
            headers=self._auth(uid),
            timeout=self.settings.REQUEST_TIMEOUT,
        )
        return await self._send(request)

    async def delete_face(self, uid: str, face_id: Any, timeout: Optional[float] = None) -> httpx.Response:
        request = self._client.build_request(
            "DELETE",
            f"/faces/delete/{quote(str(face_id), safe='')}",
            headers=self._auth(uid),
            timeout=timeout if timeout is not None else self.settings.DELETE_TIMEOUT,
        )
        return await self._send(request)
