import asyncio
import logging
from typing import Awaitable, TypeVar

from fastapi import APIRouter, HTTPException, Request

from podscript.api.deps import PipelineCurrent
from podscript.models import ScriptRequest, ScriptResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scripts", tags=["Scripts"])

DISCONNECT_POLL_SECONDS = 0.5

T = TypeVar("T")


async def run_until_disconnected(request: Request, work: Awaitable[T]) -> T:
    """Awaits work, cancelling it if the client goes away first."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected, cancelling script generation")
                task.cancel()
                raise HTTPException(status_code=499, detail="Client disconnected")
    except asyncio.CancelledError:
        task.cancel()
        raise


@router.post("", response_model=ScriptResult)
async def create_script(
    req: ScriptRequest, request: Request, pipeline: PipelineCurrent
) -> ScriptResult:
    return await run_until_disconnected(request, pipeline.run(req.topic, req.prompt))
