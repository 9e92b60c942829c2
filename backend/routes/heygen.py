"""
HeyGen Router — Sleft Signals
=============================

Streaming-avatar proxies. Upstream error status and payload pass through.

Endpoints:
----------
- POST /api/heygen/token            → streaming access token
- GET  /api/heygen/avatars          → avatar catalogue
- POST /api/heygen/streaming/new    → new streaming session
- POST /api/heygen/chat             → LLM reply spoken by the avatar
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from backend.dependencies import get_heygen, get_llm_client
from clients.heygen_client import HeyGenClient, HeyGenError
from clients.llm_client import LLMClient

router = APIRouter(tags=["heygen"])

AVATAR_PROMPT = (
    "You are a helpful business strategy assistant for Sleft Signals. Keep responses "
    "concise and conversational, under 80 words. Speak naturally as if you're having "
    "a face-to-face conversation."
)


class AvatarChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    session_id: Optional[str] = Field(default=None, alias="sessionId")


def _upstream(e: HeyGenError) -> JSONResponse:
    logger.warning(f"[HeyGen] ⚠️ {e} → {e.payload}")
    return JSONResponse(status_code=e.status_code, content=e.payload)


@router.post("/heygen/token")
def create_token(heygen: HeyGenClient = Depends(get_heygen)) -> Any:
    try:
        return {"token": heygen.create_token()}
    except HeyGenError as e:
        return _upstream(e)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[HeyGen] ❌ Token creation failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to create token")


@router.get("/heygen/avatars")
def list_avatars(heygen: HeyGenClient = Depends(get_heygen)) -> Any:
    try:
        return heygen.list_avatars()
    except HeyGenError as e:
        return _upstream(e)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[HeyGen] ❌ Avatar fetch failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch avatars")


@router.post("/heygen/streaming/new")
def new_streaming_session(heygen: HeyGenClient = Depends(get_heygen)) -> Any:
    try:
        return heygen.new_streaming_session()
    except HeyGenError as e:
        return _upstream(e)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[HeyGen] ❌ Streaming session failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to create streaming session")


@router.post("/heygen/chat")
async def avatar_chat(
    request: AvatarChatRequest,
    heygen: HeyGenClient = Depends(get_heygen),
    llm: Optional[LLMClient] = Depends(get_llm_client),
) -> Any:
    """Generate a short reply and have the avatar speak it; the text is not returned."""
    if not request.message or not request.session_id:
        raise HTTPException(status_code=400, detail="message and sessionId are required")
    if llm is None:
        raise HTTPException(status_code=500, detail="Failed to get avatar response")

    try:
        reply = await llm.complete(
            [
                {"role": "system", "content": AVATAR_PROMPT},
                {"role": "user", "content": request.message},
            ],
            max_tokens=120,
            temperature=0.7,
        )
        task_id = await run_in_threadpool(heygen.speak, request.session_id, reply)
    except HeyGenError as e:
        logger.warning(f"[HeyGen] ⚠️ Task error: {e.payload}")
        return JSONResponse(
            status_code=e.status_code,
            content={"error": "Failed to send message to avatar", "details": e.payload},
        )
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[HeyGen] ❌ Avatar chat failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to get avatar response")

    return {"success": True, "taskId": task_id}
