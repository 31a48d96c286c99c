from typing import Any, Dict

from fastapi import HTTPException, Request, UploadFile

from controllers.common import require_workspace
from models.errors import InvalidTransitionError, UploadValidationError
from models.session_models import UploadedImage


async def upload_image(request: Request, file: UploadFile) -> Dict[str, Any]:
    """Validate the uploaded X-ray and decode it into the session preview.

    Args:
        request: FastAPI Request (used to access the shared workspace).
        file: Uploaded image; its declared content type and size are checked.

    Returns:
        The analysis session snapshot.

    Raises:
        HTTPException(415/413) for validation failures, 409 while busy.
    """
    workspace = require_workspace(request)
    upload = UploadedImage(
        filename=file.filename or "upload",
        content_type=file.content_type or "",
        data=await file.read(),
    )
    try:
        await workspace.analysis.process_file(upload)
    except UploadValidationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return workspace.analysis.snapshot()


async def analyze(request: Request, wait: bool = False) -> Dict[str, Any]:
    """Start the analysis, either awaiting it or leaving it to run in the background."""
    workspace = require_workspace(request)
    try:
        if wait:
            await workspace.analysis.start_analysis()
        else:
            workspace.launch_analysis()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return workspace.analysis.snapshot()


async def get_analysis(request: Request) -> Dict[str, Any]:
    return require_workspace(request).analysis.snapshot()


async def reset_analysis(request: Request) -> Dict[str, Any]:
    workspace = require_workspace(request)
    workspace.analysis.reset()
    return workspace.analysis.snapshot()


async def discuss_analysis(request: Request) -> Dict[str, Any]:
    """Open the assistant with the completed analysis as context."""
    workspace = require_workspace(request)
    try:
        conversation = workspace.discuss_current_analysis()
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return conversation.to_dict()
