"""Paper endpoints: upload and analysis, tutor chat streaming, reset.

Handles upload validation, runs the session state machine and streams
tutor replies as Server-Sent Events.
"""

import asyncio
import logging
import os
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, status
from fastapi.responses import StreamingResponse

from quantscholar.api.sessions import SessionRegistry, get_session_registry
from quantscholar.models.schemas import (
    ChatRequest,
    PaperResponse,
    SessionSnapshot,
    StreamChunk,
    StreamStatus,
    ViewState,
)
from quantscholar.session.controller import READ_FAILED_NOTICE, ViewController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/papers", tags=["papers"])

# Inline document parts are capped by the provider
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_MB", "20")) * 1024 * 1024

# Strong references to reply tasks while they stream
_background_tasks: set[asyncio.Task] = set()


def _validate_file_extension(filename: str | None) -> str:
    """Validate that file has .pdf extension.

    Args:
        filename: The uploaded filename.

    Returns:
        The validated filename.

    Raises:
        HTTPException: 400 if extension is invalid.
    """
    if not filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )

    if not filename.lower().endswith(".pdf"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF files are accepted",
        )

    return filename


async def _validate_size(file: UploadFile) -> None:
    """Check the upload size and rewind the file for encoding.

    Raises:
        HTTPException: 413 if file exceeds size limit.
    """
    content = await file.read()

    if len(content) > MAX_UPLOAD_SIZE:
        size_mb = len(content) / (1024 * 1024)
        limit_mb = MAX_UPLOAD_SIZE // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File size ({size_mb:.1f}MB) exceeds maximum allowed ({limit_mb}MB)",
        )

    await file.seek(0)


def _get_controller(registry: SessionRegistry, session_id: str) -> ViewController:
    controller = registry.get(session_id)
    if controller is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown session: {session_id}",
        )
    return controller


@router.post("", response_model=PaperResponse)
async def upload_paper(
    file: UploadFile,
    registry: SessionRegistry = Depends(get_session_registry),
) -> PaperResponse:
    """Upload a paper and return its structured analysis.

    Creates a session, encodes the PDF, then runs extraction while the
    tutor chat is opened alongside it.

    Args:
        file: The uploaded PDF file (multipart/form-data).

    Returns:
        PaperResponse with the session id and the analysis.

    Raises:
        400: Not a PDF or unreadable.
        413: File exceeds the upload limit.
        502: The model could not analyze the paper.
        503: The Gemini gateway is not configured.
    """
    filename = _validate_file_extension(file.filename)
    await _validate_size(file)

    try:
        session_id, controller = registry.create()
    except ValueError as e:
        logger.error(f"Gateway unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI gateway is not configured",
        ) from e

    await controller.select_file(file)
    snapshot = controller.snapshot()

    if snapshot.state is not ViewState.READY or snapshot.analysis is None:
        registry.discard(session_id)
        failed_read = snapshot.notice == READ_FAILED_NOTICE
        logger.warning(f"Analysis failed for {filename}: {snapshot.notice}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST if failed_read else status.HTTP_502_BAD_GATEWAY,
            detail=snapshot.notice,
        )

    return PaperResponse(
        session_id=session_id,
        file_name=snapshot.file_name,
        analysis=snapshot.analysis,
    )


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_paper(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionSnapshot:
    """Return the current snapshot of a session."""
    return _get_controller(registry, session_id).snapshot()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_paper(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    """Reset a session and forget it."""
    if not registry.discard(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown session: {session_id}",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _sse(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


async def _reply_events(
    placeholder_id: str,
    updates: asyncio.Queue[SessionSnapshot | None],
) -> AsyncIterator[str]:
    """Translate conversation snapshots into SSE chunks for one exchange."""
    sent = 0
    yield _sse(StreamChunk(content="", done=False, status=StreamStatus.RECEIVED))

    while (snapshot := await updates.get()) is not None:
        reply = next((m for m in snapshot.messages if m.id == placeholder_id), None)
        if reply is None:
            continue

        if reply.is_error:
            yield _sse(StreamChunk(content="", done=True, status=StreamStatus.ERROR, error=reply.text))
            return

        if len(reply.text) > sent:
            yield _sse(
                StreamChunk(
                    content=reply.text[sent:],
                    done=False,
                    status=StreamStatus.GENERATING,
                )
            )
            sent = len(reply.text)

        if not reply.is_streaming:
            yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE))
            return

    # The reply finished without reaching this session: it was reset mid-stream
    yield _sse(StreamChunk(content="", done=True, status=StreamStatus.ERROR, error="Session was reset"))


@router.post("/{session_id}/chat/stream")
async def stream_chat(
    session_id: str,
    request: ChatRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> StreamingResponse:
    """Ask the tutor a question and stream the reply.

    The exchange is claimed before the response starts, so a concurrent
    request for the same session gets 409 instead of a second stream.

    Args:
        session_id: Session returned by the upload endpoint.
        request: The question.

    Returns:
        Server-Sent Events, one StreamChunk per ``data:`` line.

    Raises:
        404: Unknown session.
        409: No chat open, or a reply is already streaming.
    """
    controller = _get_controller(registry, session_id)
    placeholder_id = controller.begin_user_message(request.message)
    if placeholder_id is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No chat session is open or a reply is already streaming",
        )

    updates: asyncio.Queue[SessionSnapshot | None] = asyncio.Queue()
    unsubscribe = controller.subscribe(updates.put_nowait)

    def finish(task: asyncio.Task) -> None:
        _background_tasks.discard(task)
        unsubscribe()
        # The controller notifies before returning, so None always comes last
        updates.put_nowait(None)

    # Runs to completion even if the client never reads the body
    reply = asyncio.create_task(controller.stream_reply(placeholder_id))
    _background_tasks.add(reply)
    reply.add_done_callback(finish)

    return StreamingResponse(
        _reply_events(placeholder_id, updates),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
