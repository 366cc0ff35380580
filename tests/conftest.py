"""Shared pytest fixtures for the podscript test suite."""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

# Keep real credentials out of the test run before settings are loaded
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
for key in ("GEMINI_API_KEY", "EXA_API_KEY", "ELEVENLABS_API_KEY", "SENTRY_DSN"):
    os.environ.pop(key, None)

from podscript.models import Outline  # noqa: E402


class FakeLLM:
    """Stands in for podscript.ai.models.LLM, replaying scripted responses in order."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    async def complete(self, prompt, options=None):
        self.calls.append((prompt, options))
        if not self.responses:
            return ""
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def make_llm():
    """Factory fixture for FakeLLM instances."""
    return FakeLLM


@pytest.fixture
def outline_data():
    """Outline payload as the model returns it (camelCase keys)."""
    return {
        "title": "Sanskrit: The Mother of Languages",
        "introduction": {
            "hook": "A 3,500 year old language that still shapes how we talk",
            "mainThemes": ["grammar", "history", "grammar", "influence"],
            "narrativeSetup": "Two hosts trace Sanskrit from the Vedas to modern code",
        },
        "subtopics": [
            {
                "title": "Origins",
                "keyPoint": "Sanskrit emerged around 1500 BCE",
                "supportingEvidence": "Vedic texts and Old Indo-Aryan roots",
                "narrativeConnection": "From origins to structure",
            },
            {
                "title": "Panini's grammar",
                "keyPoint": "A rule system with nearly 4,000 sutras",
                "supportingEvidence": "The Ashtadhyayi",
                "narrativeConnection": "From structure to influence",
            },
        ],
        "conclusion": {
            "keyInsights": ["Precision made it durable"],
            "fascinatingElements": ["Comparisons to programming languages"],
            "finalThoughts": "Languages carry the minds that made them",
        },
    }


@pytest.fixture
def outline(outline_data):
    return Outline.model_validate(outline_data)


def make_exa_result(title, text, url="https://example.com", summary=None):
    return SimpleNamespace(title=title, text=text, url=url, summary=summary)


@pytest.fixture
def exa_client():
    """AsyncExa stand-in returning three results about Sanskrit."""
    results = [
        make_exa_result(
            "Sanskrit language",
            "Sanskrit is a classical language with a long history of language study.",
            "https://example.com/1",
        ),
        make_exa_result(
            "Sanskrit grammar",
            "Panini described the language with remarkable precision and history.",
            "https://example.com/2",
        ),
        make_exa_result(
            "Sanskrit today",
            "The language influences many modern languages.",
            "https://example.com/3",
        ),
    ]
    client = SimpleNamespace()
    client.search_and_contents = AsyncMock(return_value=SimpleNamespace(results=results))
    return client
