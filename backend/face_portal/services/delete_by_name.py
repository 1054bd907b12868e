import logging
from typing import Any, List

import httpx

from face_portal.exceptions import ListingFailedError, PortalError
from face_portal.models.deletion import DeletionFailure, DeletionOutcome, FaceEntry
from face_portal.services.upstream import UpstreamClient, parse_body

logger = logging.getLogger(__name__)


def extract_entries(payload: Any) -> List[FaceEntry]:
    """Read face entries from a list response, tolerating both upstream shapes."""
    if not isinstance(payload, dict):
        return []
    raw = payload.get("registered_face_entries") or payload.get("registered_persons") or []
    if not isinstance(raw, list):
        return []
    return [FaceEntry.model_validate(item) for item in raw if isinstance(item, dict)]


def select_ids(entries: List[FaceEntry], name: str) -> List[Any]:
    # Entries without an id are never candidates, not failures.
    return [entry.id for entry in entries if entry.name == name and entry.id is not None]


def describe_failure(response: httpx.Response) -> Any:
    body = parse_body(response)
    if isinstance(body, dict) and body.get("error"):
        return body["error"]
    if body:
        return body
    return f"Request failed with status code {response.status_code}"


async def delete_faces_by_name(upstream: UpstreamClient, uid: str, name: str) -> DeletionOutcome:
    """Delete every face entry named ``name`` for ``uid``.

    The listing is fatal: if it fails, ``ListingFailedError`` is raised and no
    delete is attempted. Deletes run one at a time in list order and are best
    effort; each failure is recorded by id and the rest still run.
    """
    logger.info(f"[PROXY DELETE BY NAME] Step 1: Listing faces for UID: {uid}")
    try:
        list_response = await upstream.list_faces(uid)
    except PortalError as e:
        raise ListingFailedError("Failed to list faces for deletion", cause=e) from e

    if not list_response.is_success:
        logger.error(f"[PROXY DELETE BY NAME] Listing failed with status {list_response.status_code}")
        raise ListingFailedError("Failed to list faces for deletion", response=list_response)

    entries = extract_entries(parse_body(list_response))
    logger.info(f"[PROXY DELETE BY NAME] Found {len(entries)} total entries for UID.")

    outcome = DeletionOutcome(name=name, attempted_ids=select_ids(entries, name))
    if not outcome.attempted_ids:
        logger.info(f"[PROXY DELETE BY NAME] No faces found with name '{name}' for UID '{uid}'.")
        return outcome

    logger.info(
        f"[PROXY DELETE BY NAME] Step 2: Deleting {len(outcome.attempted_ids)} face(s) "
        f"with IDs: {', '.join(str(face_id) for face_id in outcome.attempted_ids)}"
    )
    for face_id in outcome.attempted_ids:
        try:
            response = await upstream.delete_face(uid, face_id)
        except PortalError as e:
            logger.error(f"[PROXY DELETE BY NAME] Failed to delete face ID: {face_id}: {e.message}")
            outcome.failures.append(
                DeletionFailure(id=face_id, status=e.status_code, error=e.details or e.message)
            )
            continue

        if not response.is_success:
            logger.error(
                f"[PROXY DELETE BY NAME] Failed to delete face ID: {face_id}: status {response.status_code}"
            )
            outcome.failures.append(
                DeletionFailure(id=face_id, status=response.status_code, error=describe_failure(response))
            )
        else:
            outcome.succeeded_count += 1

    return outcome
