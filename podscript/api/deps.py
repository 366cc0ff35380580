from typing import Annotated

from exa_py import AsyncExa
from fastapi import Depends

from podscript.ai.models import LLM, GeminiProvider, RetryPolicy
from podscript.core.config import settings
from podscript.core.services import get_exa_client, get_gemini_client, get_http_client
from podscript.worker.expander import SectionExpander
from podscript.worker.voice import AudioSynthesisDriver, ElevenLabsSynthesizer
from podscript.worker.workflows import ScriptPipeline


async def get_search_client() -> AsyncExa:
    return get_exa_client()


SearchClientCurrent = Annotated[AsyncExa, Depends(get_search_client)]


async def get_llm() -> LLM:
    return LLM(
        GeminiProvider(get_gemini_client()),
        RetryPolicy(
            max_attempts=settings.generation_max_attempts,
            base_delay=settings.generation_base_delay_seconds,
            timeout=settings.generation_timeout_seconds,
        ),
    )


LLMCurrent = Annotated[LLM, Depends(get_llm)]


async def get_pipeline(llm: LLMCurrent, search_client: SearchClientCurrent) -> ScriptPipeline:
    return ScriptPipeline(
        llm,
        SectionExpander(
            llm,
            max_iterations=settings.max_expansion_iterations,
            concurrency=settings.expansion_concurrency,
        ),
        search_client=search_client,
        subtopic_count=settings.outline_subtopics,
        deadline=settings.pipeline_deadline_seconds,
    )


PipelineCurrent = Annotated[ScriptPipeline, Depends(get_pipeline)]


async def get_audio_driver() -> AudioSynthesisDriver:
    synthesizer = ElevenLabsSynthesizer(
        get_http_client(),
        api_key=settings.elevenlabs_api_key,
        model_id=settings.elevenlabs_model_id,
        base_url=settings.elevenlabs_base_url,
    )
    return AudioSynthesisDriver(synthesizer)


AudioDriverCurrent = Annotated[AudioSynthesisDriver, Depends(get_audio_driver)]
