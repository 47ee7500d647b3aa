"""Server-Sent Events (SSE) endpoint."""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from prwatch.api.dependencies import EventManagerDep

router = APIRouter(prefix="/events", tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/stream")
async def event_stream(event_manager: EventManagerDep) -> StreamingResponse:
    """Stream ``notification``, ``refresh_completed`` and ``heartbeat`` events."""
    # Subscribe before the response starts so no event published meanwhile is lost.
    subscriber = event_manager.subscribe()
    return StreamingResponse(
        event_manager.stream(subscriber),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
