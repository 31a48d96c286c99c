from typing import Any, Dict

from fastapi import HTTPException, Request

from controllers.common import require_workspace
from models.errors import InvalidTransitionError
from services.navigation import View


def _view_state(request: Request) -> Dict[str, Any]:
    workspace = require_workspace(request)
    state = workspace.selector.to_dict()
    state["conversation"] = workspace.conversation.to_dict() if workspace.conversation else None
    return state


async def get_view(request: Request) -> Dict[str, Any]:
    return _view_state(request)


async def navigate(request: Request, view_name: str) -> Dict[str, Any]:
    """Switch the active view by name (case-insensitive)."""
    try:
        view = View(view_name.upper())
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown view {view_name!r}") from exc

    try:
        require_workspace(request).navigate(view)
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _view_state(request)
