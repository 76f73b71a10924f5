"""REST endpoints for player boxes."""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api", tags=["boxes"])


@router.get("/box/{discord_id}")
def get_box(request: Request, discord_id: str):
    """Get the saved box of a player (empty if none)."""
    return {"box": request.app.state.boxes.get_box(discord_id)}
