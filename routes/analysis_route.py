"""FastAPI routes for the analyzer view."""

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from controllers.analysis_controller import analyze, discuss_analysis, get_analysis, reset_analysis, upload_image

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.get("")
async def get_analysis_route(request: Request):
	"""Return the current analysis session state."""
	return await get_analysis(request)


@router.post("/upload")
async def upload_route(request: Request, file: UploadFile = File(...)):
	try:
		return await upload_image(request, file)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/analyze")
async def analyze_route(request: Request, wait: bool = False):
	"""Start the analysis; with `wait=true` respond only once it has finished."""
	try:
		return await analyze(request, wait)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/reset")
async def reset_route(request: Request):
	return await reset_analysis(request)


@router.post("/discuss")
async def discuss_route(request: Request):
	try:
		return await discuss_analysis(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
