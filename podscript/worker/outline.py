import json
import logging
from string import Template

from pydantic import ValidationError

from podscript.ai import helpers, prompts
from podscript.ai.models import LLM, GenerationOptions
from podscript.core.config import settings
from podscript.core.errors import OutlineParseError, ParseError
from podscript.models import Outline, ResearchBundle

logger = logging.getLogger(__name__)

MAX_SUBTOPICS = 6


def format_results(research: ResearchBundle) -> str:
    return json.dumps(
        [r.model_dump() for r in research.raw_results], indent=2, ensure_ascii=False
    )


def build_outline_prompt(
    research: ResearchBundle, instruction: str | None = None, subtopic_count: int = 4
) -> str:
    return Template(prompts.outline_user).substitute(
        topic=research.topic,
        overview=research.overview,
        keywords=", ".join(research.top_keywords),
        results=format_results(research),
        subtopic_count=subtopic_count,
        instruction=f"4. Additional instruction: {instruction}" if instruction else "",
    )


def parse_outline(text: str) -> Outline:
    try:
        data = helpers.extract_json_object(text)
    except ParseError as e:
        raise OutlineParseError(e.message, raw_text=text) from e

    try:
        outline = Outline.model_validate(data)
    except ValidationError as e:
        raise OutlineParseError(f"Outline is missing required fields: {e}", raw_text=text) from e

    if len(outline.subtopics) > MAX_SUBTOPICS:
        logger.warning(
            "Outline returned %d subtopics, keeping the first %d",
            len(outline.subtopics),
            MAX_SUBTOPICS,
        )
        outline = outline.model_copy(update={"subtopics": outline.subtopics[:MAX_SUBTOPICS]})
    return outline


async def synthesize_outline(
    research: ResearchBundle,
    llm: LLM,
    instruction: str | None = None,
    subtopic_count: int = settings.outline_subtopics,
) -> Outline:
    text = await llm.complete(
        build_outline_prompt(research, instruction, subtopic_count),
        GenerationOptions(
            temperature=0.4,
            max_output_tokens=4096,
            system_instruction=prompts.outline_system,
            json_output=True,
            thinking_budget=0,
        ),
    )
    outline = parse_outline(text)
    logger.info("Outline %r with %d subtopics", outline.title, len(outline.subtopics))
    return outline
