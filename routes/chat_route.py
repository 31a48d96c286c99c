"""FastAPI routes for the assistant view."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.chat_controller import get_chat, send_message

router = APIRouter(prefix="/chat", tags=["chat"])


class MessagePayload(BaseModel):
	text: str


@router.get("")
async def get_chat_route(request: Request):
	return await get_chat(request)


@router.post("/messages")
async def post_message_route(request: Request, payload: MessagePayload):
	try:
		return await send_message(request, payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
