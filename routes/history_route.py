from fastapi import APIRouter, HTTPException, Request

from controllers.history_controller import (
    discuss_record,
    download_report,
    get_record,
    get_thumbnail,
    list_history,
    open_record,
)

router = APIRouter(prefix="/history", tags=["history"])


@router.get("")
async def list_history_route(request: Request):
    """Return past analyses, most recent first (an empty list when there are none)."""
    return await list_history(request)


@router.get("/{record_id}")
async def get_record_route(request: Request, record_id: str):
    """Return the stored record, image included, without changing the view."""
    return await get_record(request, record_id)


@router.post("/{record_id}/select")
async def open_record_route(request: Request, record_id: str):
    """Select the record and switch to the detail view."""
    return await open_record(request, record_id)


@router.get("/{record_id}/thumbnail")
async def thumbnail_route(request: Request, record_id: str):
    """Return the PNG thumbnail bytes for the specified record id."""
    try:
        return await get_thumbnail(request, record_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{record_id}/report")
async def report_route(request: Request, record_id: str):
    return await download_report(request, record_id)


@router.post("/{record_id}/discuss")
async def discuss_record_route(request: Request, record_id: str):
    return await discuss_record(request, record_id)
