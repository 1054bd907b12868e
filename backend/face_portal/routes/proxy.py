from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response, StreamingResponse
from typing import Optional
import logging

import httpx

from face_portal.exceptions import MissingFieldError, RequestPreparationError
from face_portal.services.upstream import ImagePayload, parse_body, relay_headers
from face_portal.utils.auth import get_upstream

logger = logging.getLogger(__name__)
router = APIRouter()


def relay_response(response: httpx.Response, fallback_error: str) -> Response:
    """Mirror an upstream JSON reply: status, custom headers and body."""
    headers = relay_headers(response)
    body = parse_body(response)

    if body is None:
        if not response.is_success:
            return JSONResponse(
                status_code=response.status_code,
                headers=headers,
                content={
                    "error": fallback_error,
                    "details": f"Request failed with status code {response.status_code}",
                    "backend_status": response.status_code,
                },
            )
        return Response(status_code=response.status_code, headers=headers)

    if isinstance(body, str):
        return Response(
            content=response.content,
            status_code=response.status_code,
            headers=headers,
            media_type=response.headers.get("content-type", "text/plain"),
        )

    return JSONResponse(status_code=response.status_code, headers=headers, content=body)


async def read_image(image: Optional[UploadFile], tag: str) -> ImagePayload:
    if image is None:
        logger.error(f"[{tag}] No image file found.")
        raise MissingFieldError("No image file found in proxy request")
    try:
        content = await image.read()
    except Exception as e:
        logger.error(f"[{tag}] Failed to read uploaded image: {str(e)}", exc_info=True)
        raise RequestPreparationError(
            "An error occurred while preparing the request", details=str(e)
        )
    return ImagePayload(content, image.filename, image.content_type)


async def stream_body(response: httpx.Response):
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
        logger.info("[PROXY RECOGNIZE] Stream finished.")
    except httpx.HTTPError as e:
        # Headers are already on the wire; the connection is dropped.
        logger.error(f"[PROXY RECOGNIZE] Stream error piping response: {str(e)}")
        raise
    finally:
        # Sole place the upstream response is closed: runs on drain and on failure.
        await response.aclose()


@router.post("/register")
async def proxy_register(
    image: Optional[UploadFile] = File(None),
    uid: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    upstream=Depends(get_upstream),
):
    tag = "PROXY REGISTER"
    image_payload = await read_image(image, tag)
    if not uid:
        logger.error(f"[{tag}] No UID found.")
        raise MissingFieldError("No UID found in proxy request")
    if not name:
        logger.error(f"[{tag}] No name found.")
        raise MissingFieldError("No name found in proxy request")

    logger.info(f"[{tag}] Sending request to backend API with UID: {uid}, Name: {name}")
    response = await upstream.register(uid, name, image_payload)
    logger.info(f"[{tag}] Backend API response status: {response.status_code}")

    return relay_response(response, "Backend API error")


@router.post("/recognize")
async def proxy_recognize(
    image: Optional[UploadFile] = File(None),
    uid: Optional[str] = Form(None),
    upstream=Depends(get_upstream),
):
    tag = "PROXY RECOGNIZE"
    image_payload = await read_image(image, tag)
    if not uid:
        logger.error(f"[{tag}] No UID found.")
        raise MissingFieldError("No UID found in proxy request")

    logger.info(f"[{tag}] Sending request to backend API with UID: {uid}")
    response = await upstream.recognize(uid, image_payload)
    content_type = response.headers.get("content-type", "application/octet-stream")
    logger.info(
        f"[{tag}] Backend API response status: {response.status_code}, Content-Type: {content_type}"
    )

    # Error replies are streamed through unchanged, like successful ones.
    return StreamingResponse(
        stream_body(response),
        status_code=response.status_code,
        headers=relay_headers(response),
        media_type=content_type,
    )
