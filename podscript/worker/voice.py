import asyncio
import logging
from collections import deque
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Protocol

import httpx

from podscript.core.config import settings
from podscript.core.errors import ConfigurationError, SynthesisFailed
from podscript.models import AudioSegment, Utterance, VoiceProfile
from podscript.worker.helpers import get_voice

logger = logging.getLogger(__name__)

REQUEST_HISTORY_SIZE = 3

# Keeps running synthesis tasks referenced until they finish
_background_tasks: set[asyncio.Task] = set()


class AudioStream:
    """Byte channel between a synthesis task and whoever streams the audio out."""

    def __init__(self):
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self.closed = False
        self.error: Exception | None = None

    async def write(self, chunk: bytes) -> None:
        if self.closed:
            raise RuntimeError("Audio stream is closed")
        await self._queue.put(chunk)

    async def close(self, error: Exception | None = None) -> None:
        if self.closed:
            return
        self.closed = True
        self.error = error
        await self._queue.put(None)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk


@dataclass
class SynthesisStream:
    request_id: str | None
    chunks: AsyncIterator[bytes]


class Synthesizer(Protocol):
    def stream(
        self, text: str, profile: VoiceProfile, previous_request_ids: list[str]
    ) -> AbstractAsyncContextManager[SynthesisStream]: ...


class ElevenLabsSynthesizer:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str | None = settings.elevenlabs_api_key,
        model_id: str = settings.elevenlabs_model_id,
        base_url: str = settings.elevenlabs_base_url,
    ):
        if not api_key:
            raise ConfigurationError("ElevenLabs API key not configured")
        self.http_client = http_client
        self.api_key = api_key
        self.model_id = model_id
        self.base_url = base_url.rstrip("/")

    @asynccontextmanager
    async def stream(
        self, text: str, profile: VoiceProfile, previous_request_ids: list[str]
    ) -> AsyncIterator[SynthesisStream]:
        url = f"{self.base_url}/v1/text-to-speech/{profile.voice_id}/stream"
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {
                "stability": profile.stability,
                "similarity_boost": profile.similarity_boost,
            },
            "previous_request_ids": previous_request_ids[-REQUEST_HISTORY_SIZE:],
        }
        headers = {"xi-api-key": self.api_key, "Accept": "audio/mpeg"}

        try:
            async with self.http_client.stream(
                "POST", url, headers=headers, json=payload
            ) as response:
                if response.is_error:
                    body = await response.aread()
                    raise SynthesisFailed(
                        f"ElevenLabs returned {response.status_code}: {body[:200]!r}"
                    )
                yield SynthesisStream(
                    request_id=response.headers.get("request-id"),
                    chunks=response.aiter_bytes(),
                )
        except httpx.HTTPError as e:
            raise SynthesisFailed(f"ElevenLabs request failed: {e}") from e


class AudioSynthesisDriver:
    def __init__(self, synthesizer: Synthesizer, history_size: int = REQUEST_HISTORY_SIZE):
        self.synthesizer = synthesizer
        self.history_size = history_size

    async def run(self, utterances: list[Utterance], stream: AudioStream) -> list[AudioSegment]:
        """
        Synthesizes utterances one after another, forwarding audio as it arrives.

        The first failing segment stops the run. Audio already written stays in the stream,
        the error is recorded on it, and the stream is always closed.
        """
        history: deque[str] = deque(maxlen=self.history_size)
        segments: list[AudioSegment] = []
        error: Exception | None = None
        total = len(utterances)

        try:
            for index, utterance in enumerate(utterances, start=1):
                logger.info("Processing segment %d/%d", index, total)
                profile = get_voice(utterance.speaker_id)
                size = 0

                async with self.synthesizer.stream(
                    utterance.text, profile, list(history)
                ) as synthesis:
                    if synthesis.request_id:
                        history.append(synthesis.request_id)
                    async for chunk in synthesis.chunks:
                        size += len(chunk)
                        await stream.write(chunk)

                segments.append(AudioSegment(utterance, synthesis.request_id, size))
            logger.info("Finished processing all %d segments", total)
        except Exception as e:
            logger.exception("Error processing audio segment %d/%d", len(segments) + 1, total)
            error = e
        finally:
            logger.debug("Closing audio stream")
            await stream.close(error)

        return segments


def start_synthesis(driver: AudioSynthesisDriver, utterances: list[Utterance]) -> AudioStream:
    """Runs the driver in the background and returns the stream it writes to."""
    stream = AudioStream()
    task = asyncio.create_task(driver.run(utterances, stream))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return stream
