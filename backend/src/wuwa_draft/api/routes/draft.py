"""REST endpoints for draft room state."""

from fastapi import APIRouter, Request

from wuwa_draft.api.websockets.draft_ws import serialize_room_state

router = APIRouter(prefix="/api", tags=["draft"])


@router.get("/draft")
def get_draft_state(request: Request):
    """Seats, current draft snapshot and config.

    ``draft_state`` is null when no draft has been started.
    """
    return serialize_room_state(request.app.state.room, request.app.state.engine)

