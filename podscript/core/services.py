from functools import lru_cache

import httpx
from exa_py import AsyncExa
from google import genai

from podscript.core.config import settings
from podscript.core.errors import ConfigurationError, MissingSearchKey


@lru_cache
def get_exa_client() -> AsyncExa:
    if not settings.exa_api_key:
        raise MissingSearchKey("Missing Exa API key")
    return AsyncExa(settings.exa_api_key)


@lru_cache
def get_gemini_client() -> genai.Client:
    if not settings.gemini_api_key:
        raise ConfigurationError("Missing Gemini API key")
    return genai.Client(api_key=settings.gemini_api_key)


@lru_cache
def get_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.elevenlabs_timeout_seconds)


async def close_clients() -> None:
    if get_http_client.cache_info().currsize:
        await get_http_client().aclose()
        get_http_client.cache_clear()
