from fastapi import HTTPException, Request

from services.workspace import Workspace


def require_workspace(request: Request) -> Workspace:
    """Return the shared workspace from app state or fail with 500."""
    workspace = getattr(request.app.state, "workspace", None)
    if workspace is None:
        raise HTTPException(status_code=500, detail="Workspace not initialized.")
    return workspace
