from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import json
import logging

from face_portal.exceptions import ListingFailedError, MissingFieldError
from face_portal.models.deletion import DeleteByNameRequest, DeletionOutcome, DeletionStatus
from face_portal.routes.proxy import relay_response
from face_portal.services.delete_by_name import delete_faces_by_name
from face_portal.utils.auth import get_upstream, require_portal_uid

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/faces/list")
async def proxy_faces_list(
    uid: str = Depends(require_portal_uid),
    upstream=Depends(get_upstream),
):
    logger.info(f"[PROXY FACES LIST] Sending request to backend API with UID: {uid}")
    response = await upstream.list_faces(uid)
    logger.info(f"[PROXY FACES LIST] Backend API response status: {response.status_code}")
    return relay_response(response, "Backend API error listing faces")


async def read_target_name(request: Request) -> str:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    try:
        payload = DeleteByNameRequest.model_validate(body if isinstance(body, dict) else {})
    except ValidationError:
        payload = DeleteByNameRequest()
    if not payload.name:
        logger.error("[PROXY DELETE BY NAME] 'name' not found in JSON body.")
        raise MissingFieldError("'name' not found in JSON body")
    return payload.name


def deletion_response(outcome: DeletionOutcome) -> JSONResponse:
    status = outcome.outcome
    if status == DeletionStatus.NONE_MATCHED:
        return JSONResponse(status_code=200, content={
            "outcome": status.value,
            "message": f"No faces found with name '{outcome.name}' to delete.",
            "deleted_count": 0,
        })
    if status == DeletionStatus.ALL_DELETED:
        return JSONResponse(status_code=200, content={
            "outcome": status.value,
            "message": f"Successfully deleted {outcome.succeeded_count} entries for name '{outcome.name}'.",
            "deleted_count": outcome.succeeded_count,
        })
    return JSONResponse(status_code=207, content={
        "outcome": status.value,
        "message": f"Deletion attempt for name '{outcome.name}' completed with some issues.",
        "successfully_deleted_count": outcome.succeeded_count,
        "failed_deletions_count": len(outcome.failures),
        "failures": [failure.model_dump() for failure in outcome.failures],
    })


@router.delete("/faces/deletebyname")
async def proxy_delete_by_name(
    request: Request,
    uid: str = Depends(require_portal_uid),
    upstream=Depends(get_upstream),
):
    logger.info("[PROXY DELETE BY NAME] Received request.")
    name = await read_target_name(request)
    logger.info(f"[PROXY DELETE BY NAME] Orchestrating delete for UID: {uid}, Name: {name}")

    try:
        outcome = await delete_faces_by_name(upstream, uid, name)
    except ListingFailedError as e:
        if e.response is not None:
            return relay_response(e.response, e.message)
        raise

    return deletion_response(outcome)
