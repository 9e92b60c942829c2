"""
Chat Router — Sleft Signals
===========================

LLM-backed conversations.

Endpoints:
----------
- POST   /api/chat                          → one-shot strategy advice
- POST   /api/chat/discovery                → referral-partner discovery conversation
- DELETE /api/chat/discovery                → forget a discovery conversation
- POST   /api/chat/onboarding/start         → onboarding greeting (LLM, with fixed fallback)
- POST   /api/chat/onboarding/continue      → rule-based onboarding interview step

Conversation state lives in the app's ConversationStore instances, which
expire idle entries on their own.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from analytics.discovery import (
    FALLBACK_REPLY,
    GREETING,
    RECOVERY_MESSAGE,
    DiscoveryConversation,
    build_proposed_strategy,
    extracted_data,
    parse_extraction,
)
from analytics.onboarding import START_PROMPT, OnboardingMemory, continue_onboarding, fallback_start
from backend.dependencies import (
    get_discovery_store,
    get_llm_client,
    get_onboarding_store,
    settings_dep,
)
from clients.llm_client import LLMClient
from core.config import Settings
from core.conversation_store import ConversationStore

router = APIRouter(tags=["chat"])

ADVICE_PROMPT = (
    "You are a helpful business strategy assistant for Sleft Signals. "
    "Provide concise, actionable advice for business growth and strategy."
)

# --------------------------------------------------------------------------- #
# Models
# --------------------------------------------------------------------------- #

class ChatRequest(BaseModel):
    message: Optional[str] = None


class DiscoveryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    message: Optional[str] = None
    reset: bool = False


class OnboardingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    user_message: Optional[str] = Field(default=None, alias="userMessage")


def _onboarding_key(user_id: str) -> str:
    return f"{user_id}_conversation"


def _discovery_failure(error: str) -> HTTPException:
    return HTTPException(
        status_code=500,
        detail={
            "error": error,
            "message": RECOVERY_MESSAGE,
            "extractedData": {},
            "isReadyForStrategy": False,
            "proposedStrategy": None,
        },
    )


# --------------------------------------------------------------------------- #
# One-shot advice
# --------------------------------------------------------------------------- #

@router.post("/chat")
async def chat(request: ChatRequest, llm: Optional[LLMClient] = Depends(get_llm_client)) -> Dict[str, Any]:
    if not request.message:
        raise HTTPException(status_code=400, detail="message is required")
    if llm is None:
        raise HTTPException(status_code=500, detail="Failed to get AI response")

    try:
        reply = await llm.complete(
            [
                {"role": "system", "content": ADVICE_PROMPT},
                {"role": "user", "content": request.message},
            ],
            max_tokens=200,
            temperature=0.7,
        )
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[OpenAI] ⚠️ Chat failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to get AI response")
    return {"message": reply}


# --------------------------------------------------------------------------- #
# Discovery conversation
# --------------------------------------------------------------------------- #

@router.post("/chat/discovery")
async def discovery_chat(
    request: DiscoveryRequest,
    store: ConversationStore = Depends(get_discovery_store),
    llm: Optional[LLMClient] = Depends(get_llm_client),
) -> Dict[str, Any]:
    """
    One turn of the discovery chat.

    A new conversation without a message answers with the fixed greeting.
    Otherwise the reply comes from the LLM, followed by a temperature-0
    extraction pass that decides whether the outreach strategy is ready.
    """
    if not request.user_id:
        raise HTTPException(status_code=400, detail="userId required")

    if request.reset:
        store.evict(request.user_id)

    conversation = store.get(request.user_id)
    if conversation is None:
        conversation = DiscoveryConversation.start()
        store.put(request.user_id, conversation)
        if not request.message:
            return {
                "success": True,
                "message": GREETING,
                "extractedData": {},
                "isReadyForStrategy": False,
                "proposedStrategy": None,
            }

    if not request.message:
        raise HTTPException(status_code=400, detail="message required")
    if llm is None:
        raise _discovery_failure("OpenAI is not configured")

    conversation.add("user", request.message)
    try:
        reply = await llm.complete(conversation.messages, max_tokens=500, temperature=0.7)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Discovery] ❌ Chat failed for {request.user_id}: {e}")
        raise _discovery_failure("Chat failed")

    reply = reply or FALLBACK_REPLY
    conversation.add("assistant", reply)

    data: Dict[str, Any] = {}
    is_ready = False
    try:
        raw = await llm.complete(conversation.extraction_messages(), max_tokens=1000, temperature=0)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Discovery] ⚠️ Extraction failed for {request.user_id}: {e}")
        raw = None

    parsed = parse_extraction(raw) if raw is not None else None
    if parsed is not None:
        data = extracted_data(parsed)
        is_ready = parsed.get("isComplete") is True
        conversation.extracted = data

    store.put(request.user_id, conversation)
    return {
        "success": True,
        "message": reply,
        "extractedData": data,
        "isReadyForStrategy": is_ready,
        "proposedStrategy": build_proposed_strategy(data, is_ready),
    }


@router.delete("/chat/discovery")
def reset_discovery(
    request: DiscoveryRequest,
    store: ConversationStore = Depends(get_discovery_store),
) -> Dict[str, Any]:
    if request.user_id:
        store.evict(request.user_id)
    return {"success": True}


# --------------------------------------------------------------------------- #
# Onboarding interview
# --------------------------------------------------------------------------- #

@router.post("/chat/onboarding/start")
async def onboarding_start(
    request: OnboardingRequest,
    settings: Settings = Depends(settings_dep),
    store: ConversationStore = Depends(get_onboarding_store),
    llm: Optional[LLMClient] = Depends(get_llm_client),
) -> Dict[str, Any]:
    """Greeting from the LLM in JSON mode; the fixed greeting when that fails."""
    if request.user_id:
        store.evict(_onboarding_key(request.user_id))

    if llm is None:
        return fallback_start()

    try:
        raw = await llm.complete(
            [
                {"role": "system", "content": START_PROMPT},
                {"role": "user", "content": "Please start our conversation with an engaging greeting."},
            ],
            model=settings.openai_onboarding_model,
            max_tokens=1000,
            temperature=0.8,
            json_mode=True,
        )
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Onboarding] ⚠️ Start failed, using fallback greeting: {e}")
        return fallback_start()

    parsed = parse_extraction(raw)
    if not parsed or not parsed.get("message"):
        return fallback_start()
    return {"success": True, **parsed}


@router.post("/chat/onboarding/continue")
def onboarding_continue(
    request: OnboardingRequest,
    store: ConversationStore = Depends(get_onboarding_store),
) -> Dict[str, Any]:
    if not request.user_id or not request.user_message:
        raise HTTPException(status_code=400, detail="userId and userMessage are required")

    key = _onboarding_key(request.user_id)
    memory = store.get(key) or OnboardingMemory()
    result = continue_onboarding(memory, request.user_message)
    store.put(key, memory)

    if result["is_business_data_collection"]:
        logger.info(f"[Onboarding] ✅ Extracted business data for {request.user_id}")
    return result
