"""Annotate API endpoints"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from models.annotate import AnnotateRequest, AnnotateResponse, StreamEvent
from services.config_manager import ConfigManager
from services.errors import InvalidPage
from services.github_client import GitHubClient
from services.page import PageView
from services.scanner import PageScanner

router = APIRouter()

# In-memory page sessions: one scanner (and its caches) per page view
sessions: dict[str, PageScanner] = {}


def get_scanner(page_id: str) -> PageScanner:
    """Return the page's scanner, creating it with the current settings"""
    if page_id not in sessions:
        settings = ConfigManager.get_instance().get_settings()
        sessions[page_id] = PageScanner(GitHubClient.from_settings(settings), settings)
    return sessions[page_id]


def identity_or_none(page: PageView):
    try:
        return page.identity()
    except InvalidPage:
        return None


@router.post("", response_model=AnnotateResponse)
async def annotate(request: AnnotateRequest) -> AnnotateResponse:
    """Run one annotation pass over a page snapshot"""
    page_id = request.page_id or str(uuid.uuid4())
    scanner = get_scanner(page_id)
    page = PageView.from_request(request)

    results = await scanner.scan_once(page)

    return AnnotateResponse(page_id=page_id, identity=identity_or_none(page), regions=results)


@router.post("/stream")
async def annotate_stream(request: AnnotateRequest):
    """Run one annotation pass and stream each region's outcome (SSE)"""
    page_id = request.page_id or str(uuid.uuid4())
    scanner = get_scanner(page_id)
    page = PageView.from_request(request)

    async def event_generator():
        count = 0
        try:
            async for result in scanner.scan(page):
                count += 1
                event = StreamEvent(type="region", region=result)
                yield {"event": "message", "data": event.model_dump_json(by_alias=True)}

            event = StreamEvent(type="done", done=True, metadata={"page_id": page_id, "regions": count})
            yield {"event": "message", "data": event.model_dump_json()}

        except Exception as e:
            event = StreamEvent(type="error", error=str(e))
            yield {"event": "message", "data": event.model_dump_json()}

    return EventSourceResponse(event_generator())


@router.delete("/{page_id}")
async def end_page(page_id: str) -> dict[str, str]:
    """Forget a page view and its caches (navigation or unload)"""
    if sessions.pop(page_id, None) is None:
        raise HTTPException(status_code=404, detail=f"Unknown page: {page_id}")
    return {"status": "success", "message": "Page session closed"}
