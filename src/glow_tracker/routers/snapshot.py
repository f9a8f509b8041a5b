from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from starlette.concurrency import run_in_threadpool

from ..schemas import ImportResultOut
from ..snapshot import EXPORT_FILENAME
from ..tracker import Tracker, get_tracker

router = APIRouter(
    prefix="/api/v1/snapshot",
    tags=["snapshot"],
)


def _get_tracker(tracker: Tracker = Depends(get_tracker)) -> Tracker:
    return tracker


# PUBLIC_INTERFACE
@router.get(
    "/export",
    summary="Export Snapshot",
    description="Download every category plus an exportDate timestamp as one JSON document.",
    responses={200: {"content": {"application/json": {}}, "description": "Snapshot document"}},
)
def export_all(tracker: Tracker = Depends(_get_tracker)) -> Response:
    """
    Serialize all categories as a downloadable backup file.
    """
    return Response(
        content=tracker.export_all(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


# PUBLIC_INTERFACE
@router.post(
    "/import",
    response_model=ImportResultOut,
    summary="Import Snapshot",
    description=(
        "Replace the contents of every category present in the posted document.\n\n"
        "The raw request body is the document text. Categories missing from the document "
        "are left unchanged; a malformed document changes nothing and returns 400."
    ),
    responses={
        200: {"description": "Import applied"},
        400: {"description": "Document could not be parsed"},
    },
)
async def import_all(request: Request, tracker: Tracker = Depends(_get_tracker)) -> ImportResultOut:
    """
    Import a snapshot document from the raw request body.
    """
    raw = (await request.body()).decode("utf-8", errors="replace")
    # Store writes block (sqlite), keep them off the event loop
    imported = await run_in_threadpool(tracker.import_all, raw)
    errors = [tracker.store(c).last_write_error for c in imported]
    errors = [e for e in errors if e is not None]
    return ImportResultOut(
        imported=imported,
        persisted=not errors,
        warning="; ".join(str(e) for e in errors) or None,
    )
