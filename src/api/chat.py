"""
Chat API routes for the structured (JSON) and query (text) entry points.
"""

import asyncio
import logging
from typing import AsyncGenerator, Optional, Tuple
from fastapi import APIRouter, Header, HTTPException
from fastapi.responses import PlainTextResponse, StreamingResponse

from models.schemas import ChatRequest, ChatResponse
from models.conversation import PromptMissingError, parse_messages, build_response, text_delta
from models.inference import ChatSession, UnknownModelError, HISTORY_SIZE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

DEFAULT_MODEL = "0"
EVENT_STREAM = "text/event-stream"

_DONE = object()

def create_session(model: str) -> ChatSession:
    """Build a fresh backend session; one per request."""
    return ChatSession(url=model, history_size=HISTORY_SIZE)

def _log_abandoned(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("Backend failed after the client disconnected", exc_info=error)

async def _iter_chat(session: ChatSession, prompt: str) -> AsyncGenerator[Tuple[bool, str], None]:
    """
    Run a chat and yield its progress.

    Yields (False, text) for every cumulative update reported by the backend,
    then (True, text) once with the final reply. Backend errors are raised
    from the final step.
    """
    queue: asyncio.Queue = asyncio.Queue()

    async def run() -> str:
        try:
            return await session.chat(prompt, on_message=queue.put_nowait)
        finally:
            queue.put_nowait(_DONE)

    task = asyncio.create_task(run())
    awaited = False
    try:
        while True:
            item = await queue.get()
            if item is _DONE:
                break
            yield False, item
        awaited = True
        yield True, await task
    finally:
        # Client went away; the backend call keeps running.
        if not awaited:
            if task.done():
                _log_abandoned(task)
            else:
                task.add_done_callback(_log_abandoned)

async def _structured_events(session: ChatSession, prompt: str) -> AsyncGenerator[str, None]:
    # delta holds the cumulative text
    try:
        async for final, text in _iter_chat(session, prompt):
            if not final:
                yield f"data: {build_response(text).model_dump_json(exclude_none=True)}\n"
    except Exception:
        logger.exception(f"Backend {session.src} failed while streaming")
        raise
    yield "data: [DONE]"

async def _query_chunks(session: ChatSession, prompt: str) -> AsyncGenerator[str, None]:
    sent = 0
    try:
        async for _, text in _iter_chat(session, prompt):
            chunk = text_delta(text, sent)
            sent = len(text)
            if chunk:
                yield chunk
    except Exception:
        logger.exception(f"Backend {session.src} failed while streaming")
        raise

@router.post("/", response_model=ChatResponse, response_model_exclude_none=True)
@router.post("/api/conversation", response_model=ChatResponse, response_model_exclude_none=True)
async def conversation(request: ChatRequest, accept: Optional[str] = Header(None)):
    """
    Process an OpenAI-style chat request.

    Args:
        request: ChatRequest with the target model and message history
        accept: Accept header; text/event-stream selects streaming

    Returns:
        A ChatResponse, or a stream of "data: <json>" lines ending in "data: [DONE]"
    """
    try:
        history, prompt = parse_messages(request.messages)
    except PromptMissingError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        session = create_session(request.model)
    except UnknownModelError as e:
        raise HTTPException(status_code=404, detail=str(e))
    session.history = history
    logger.debug(f"Conversation request action={request.action} turns={len(history)}")

    if EVENT_STREAM in (accept or ""):
        return StreamingResponse(_structured_events(session, prompt), media_type=EVENT_STREAM)

    try:
        content = await session.chat(prompt)
    except Exception as e:
        logger.exception(f"Backend {session.src} failed")
        raise HTTPException(status_code=500, detail=f"Error generating response: {str(e)}")
    return build_response(content, prompt)

@router.get("/")
@router.get("/api/conversation")
async def conversation_query(text: Optional[str] = None, model: Optional[str] = None):
    """
    Stream a reply to a single prompt as plain text chunks.

    Args:
        text: Prompt to send
        model: Backend to use, the first preset space by default

    Returns:
        Streaming response carrying only the newly generated text at each step
    """
    if not text:
        return PlainTextResponse("text can't be empty!", status_code=500)

    try:
        session = create_session(model or DEFAULT_MODEL)
    except UnknownModelError as e:
        return PlainTextResponse(str(e), status_code=404)

    return StreamingResponse(
        _query_chunks(session, text),
        media_type=EVENT_STREAM,
        headers={"Cache-Control": "no-cache"},
    )
