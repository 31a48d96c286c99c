from fastapi import APIRouter, Request

from controllers.view_controller import get_view, navigate

router = APIRouter(prefix="/views", tags=["views"])


@router.get("")
async def get_view_route(request: Request):
    """Return the active view with its bound record and chat context."""
    return await get_view(request)


@router.post("/{view_name}")
async def navigate_route(request: Request, view_name: str):
    return await navigate(request, view_name)
