"""
Conversation Context Server
===========================

Thin HTTP surface over the conversation context engine so the live-interview
and evaluation pipelines can build bounded prompt context from a transcript.

Endpoints:
---------
    POST /v1/context/build  - Build (and optionally render) a conversation context
    POST /v1/context/stats  - Token budget usage for a transcript
    POST /v1/context/format - Render an existing context as prompt text
    GET  /health            - Liveness check

Usage:
-----
1. Set environment variables (PORTKEY_API_KEY, PORTKEY_VIRTUAL_KEY, CONTEXT_*)
2. Run: uvicorn server:app --reload
"""

import os
import logging
from typing import Optional, List
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from interview_context import __version__
from interview_context.context import (
    ContextBudget,
    ConversationContext,
    ConversationContextBuilder,
    TokenStats,
    TranscriptEntry,
    format_context_for_instructions,
    get_default_summarizer,
)

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("interview_context.server")


# =============================================================================
# Request / Response Models
# =============================================================================

class BuildContextRequest(BaseModel):
    """Request to build a conversation context from a full transcript."""
    transcript: List[TranscriptEntry] = Field(..., description="Full transcript, chronological")
    session_id: Optional[str] = Field(None, description="Interview session for in-flight deduplication")
    format: bool = Field(False, description="Also return the rendered prompt text")


class BuildContextResponse(BaseModel):
    context: ConversationContext
    formatted: Optional[str] = None


class TranscriptRequest(BaseModel):
    transcript: List[TranscriptEntry]


class FormatContextRequest(BaseModel):
    context: ConversationContext


class FormatContextResponse(BaseModel):
    text: str


# =============================================================================
# Global instances
# =============================================================================

builder: Optional[ConversationContextBuilder] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle manager for the FastAPI app.
    """
    global builder

    budget = ContextBudget.from_env()
    builder = ConversationContextBuilder(
        summarizer=get_default_summarizer(budget),
        budget=budget,
        dedupe_in_flight=True,
    )
    logger.info(
        f"Context builder initialized: threshold={budget.compact_threshold}, "
        f"max={budget.max_conversation_tokens}, keep={budget.recent_messages_to_keep}, "
        f"summarizer={type(builder.summarizer).__name__}"
    )

    yield

    builder = None
    logger.info("Server shutdown complete")


def get_builder() -> ConversationContextBuilder:
    if builder is None:
        raise HTTPException(status_code=503, detail="Context builder not initialized")
    return builder


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title="Interview Context API",
    description="Token-bounded conversation context for AI mock interviews",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Endpoints
# =============================================================================

@app.post("/v1/context/build", response_model=BuildContextResponse)
async def build_context(
    request: BuildContextRequest,
    context_builder: ConversationContextBuilder = Depends(get_builder),
):
    """Build a conversation context, summarizing older turns when over threshold."""
    context = await context_builder.build_context(request.transcript, session_id=request.session_id)
    formatted = format_context_for_instructions(context) if request.format else None
    return BuildContextResponse(context=context, formatted=formatted)


@app.post("/v1/context/stats", response_model=TokenStats)
async def context_stats(
    request: TranscriptRequest,
    context_builder: ConversationContextBuilder = Depends(get_builder),
):
    """Token budget usage for a transcript."""
    return context_builder.get_token_stats(request.transcript)


@app.post("/v1/context/format", response_model=FormatContextResponse)
async def format_context(request: FormatContextRequest):
    """Render a previously built context as prompt text."""
    return FormatContextResponse(text=format_context_for_instructions(request.context))


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
