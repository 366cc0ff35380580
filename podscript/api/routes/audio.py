from typing import Annotated

from fastapi import APIRouter, Body, HTTPException
from fastapi.responses import StreamingResponse

from podscript.api.deps import AudioDriverCurrent
from podscript.models import AudioRequest, Utterance
from podscript.worker.voice import start_synthesis

router = APIRouter(prefix="/audio", tags=["Audio"])


@router.post("", response_class=StreamingResponse)
async def create_audio(
    req: Annotated[list[Utterance] | AudioRequest, Body()],
    driver: AudioDriverCurrent,
) -> StreamingResponse:
    script = req.script if isinstance(req, AudioRequest) else req
    if not script:
        raise HTTPException(status_code=400, detail="Script is empty")

    stream = start_synthesis(driver, script)
    return StreamingResponse(
        stream,
        media_type="audio/mpeg",
        headers={"Transfer-Encoding": "chunked"},
    )
