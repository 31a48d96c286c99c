import asyncio
from typing import Any, Dict, List

from fastapi import HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from controllers.common import require_workspace
from models.analysis_result import HistoryItem
from models.errors import RecordNotFoundError
from services.report import render_report, report_filename
from services.thumbnail_generator import ThumbnailGenerator


def _find(request: Request, record_id: str) -> HistoryItem:
    try:
        return require_workspace(request).store.get(record_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


async def list_history(request: Request) -> List[Dict[str, Any]]:
    """Return history summaries, most recent first, without the embedded images."""
    workspace = require_workspace(request)
    rows = []
    for item in workspace.store.list():
        row = item.result_only().to_dict()
        row["thumbnail_url"] = f"/history/{item.id}/thumbnail"
        rows.append(row)
    return rows


async def get_record(request: Request, record_id: str) -> Dict[str, Any]:
    return _find(request, record_id).to_dict()


async def open_record(request: Request, record_id: str) -> Dict[str, Any]:
    """Select a stored record and switch to the detail view."""
    workspace = require_workspace(request)
    try:
        record = workspace.open_record(record_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return record.to_dict()


async def get_thumbnail(request: Request, record_id: str) -> Response:
    """Controller to render the PNG thumbnail for a stored record.

    Raises:
        HTTPException(404) if the record is unknown, 422 if its image cannot be decoded.
    """
    record = _find(request, record_id)
    try:
        # Pillow work is blocking -> run in thread
        png = await asyncio.to_thread(ThumbnailGenerator().create_thumbnail_from_data_url, record.imageUrl)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return Response(content=png, media_type="image/png")


async def download_report(request: Request, record_id: str) -> PlainTextResponse:
    record = _find(request, record_id)
    return PlainTextResponse(
        render_report(record),
        headers={"Content-Disposition": f'attachment; filename="{report_filename(record)}"'},
    )


async def discuss_record(request: Request, record_id: str) -> Dict[str, Any]:
    workspace = require_workspace(request)
    try:
        conversation = workspace.discuss_record(record_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return conversation.to_dict()
