"""Live meeting WebSocket route."""

from fastapi import APIRouter, WebSocket

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/meetings")
async def meetings_socket(websocket: WebSocket) -> None:
    """Serve one live-meeting client through the application's gateway."""
    await websocket.app.state.gateway.serve(websocket)
