"""Data Transfer — export, import and bulk clear of the whole dataset.

Invariants:
    - Export serves the PERSISTED dataset as a JSON attachment named with today's date
    - Import takes raw JSON text; a failed import leaves slot and snapshot untouched
      and is reported as {"imported": false}, not as an HTTP error
    - A body that is not valid UTF-8 is a failed import, never repaired
    - Clear replaces the dataset with the empty one (and saves it)

Design Decisions:
    - Raw body read from Request instead of a Pydantic model: the snapshot codec
      owns format tolerance (missing fields, bad records), Pydantic would reject early
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from teacherhub.api.dependencies import get_store
from teacherhub.services.entity_store import EntityStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/data", tags=["data"])


@router.get("/export")
async def export_data(store: EntityStore = Depends(get_store)):
    artifact = await store.export_snapshot()
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.filename}"',
        },
    )


@router.post("/import")
async def import_data(request: Request, store: EntityStore = Depends(get_store)):
    try:
        raw = (await request.body()).decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Import body is not UTF-8: {e.reason}", extra={"path": request.url.path})
        return {"imported": False}
    imported = await store.import_snapshot(raw)
    if not imported:
        logger.info("Import failed; existing data kept")
    return {"imported": imported}


@router.delete("")
async def clear_data(store: EntityStore = Depends(get_store)):
    result = await store.clear()
    return {"outcome": result.outcome.value}
