from __future__ import annotations

from fastapi import APIRouter, Depends

from ..schemas import ThemeIn, ThemeOut
from ..tracker import Tracker, get_tracker

router = APIRouter(
    prefix="/api/v1/preferences",
    tags=["preferences"],
)


def _get_tracker(tracker: Tracker = Depends(get_tracker)) -> Tracker:
    return tracker


def _theme_out(tracker: Tracker) -> ThemeOut:
    error = tracker.theme.last_write_error
    return ThemeOut(dark=tracker.theme.dark, persisted=error is None, warning=str(error) if error else None)


# PUBLIC_INTERFACE
@router.get("/theme", response_model=ThemeOut, summary="Get Theme")
def get_theme(tracker: Tracker = Depends(_get_tracker)) -> ThemeOut:
    """Return the persisted dark-mode flag (False when never set)."""
    return _theme_out(tracker)


# PUBLIC_INTERFACE
@router.put("/theme", response_model=ThemeOut, summary="Set Theme")
def set_theme(payload: ThemeIn, tracker: Tracker = Depends(_get_tracker)) -> ThemeOut:
    """Persist the dark-mode flag."""
    tracker.theme.set(payload.dark)
    return _theme_out(tracker)
