import re
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

# Types
SpeakerId = Literal[1, 2]
UnitId = Literal["intro", "conclusion"] | int
DraftStatus = Literal["pending", "target_reached", "stalled", "ceiling_reached"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def count_words(text: str) -> int:
    return len(text.split())


# Research
class SearchResult(BaseModel):
    title: str = ""
    description: str = ""
    url: str = ""


class ResearchBundle(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    topic: str
    raw_results: list[SearchResult]
    top_keywords: list[str]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overview(self) -> str:
        themes = ", ".join(self.top_keywords[:5])
        paragraph = (
            f"The topic '{self.topic}' has been discussed widely, with recurring themes such as "
            f"{themes}. These terms frequently appeared in analyses and summaries."
        )
        return re.sub(r"\s+", " ", paragraph).strip()


# Outline
class OutlineIntroduction(CamelModel):
    hook: str
    main_themes: list[str] = []
    narrative_setup: str = ""

    @field_validator("main_themes")
    @classmethod
    def dedupe_themes(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class OutlineSubtopic(CamelModel):
    title: str
    key_point: str = ""
    supporting_evidence: str = ""
    narrative_connection: str = ""


class OutlineConclusion(CamelModel):
    key_insights: list[str] = []
    fascinating_elements: list[str] = []
    final_thoughts: str = ""


class Outline(CamelModel):
    title: str
    introduction: OutlineIntroduction
    subtopics: list[OutlineSubtopic] = Field(min_length=1)
    conclusion: OutlineConclusion


# Expansion
class ScriptContext(BaseModel):
    topic: str
    title: str
    keywords: list[str] = []
    prompt: str | None = None


@dataclass
class SectionDraft:
    unit_id: UnitId
    label: str
    target: int
    accumulated_text: str = ""
    iterations: int = 0
    status: DraftStatus = "pending"

    @property
    def word_count(self) -> int:
        return count_words(self.accumulated_text)

    def append(self, text: str) -> None:
        if self.accumulated_text:
            self.accumulated_text = f"{self.accumulated_text}\n\n{text}"
        else:
            self.accumulated_text = text


class SectionSummary(CamelModel):
    unit_id: UnitId
    label: str
    target: int
    word_count: int
    iterations: int
    status: DraftStatus


# Script
class Utterance(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    speaker_id: SpeakerId = Field(alias="id")
    text: str = Field(min_length=1)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Utterance text must not be blank")
        return value.strip()


class ScriptRequest(BaseModel):
    topic: str = Field(min_length=1)
    prompt: str | None = None

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Topic must not be blank")
        return value.strip()


class ScriptResult(CamelModel):
    title: str
    script: list[Utterance]
    outline: Outline
    raw_text: str
    sections: list[SectionSummary]
    word_count: int
    target_word_count: int
    warnings: list[str] = []


class AudioRequest(BaseModel):
    script: list[Utterance]


# Audio
@dataclass
class VoiceProfile:
    voice_id: str
    stability: float
    similarity_boost: float


@dataclass
class AudioSegment:
    utterance: Utterance
    request_id: str | None
    size: int


# Topics
class TopicSuggestion(BaseModel):
    title: str
    description: str = ""
    tags: list[str] = []


class TopicSuggestions(BaseModel):
    topics: list[TopicSuggestion]


# Errors
class ErrorResult(BaseModel):
    error: str
    details: Any = None
