import asyncio
import logging

from exa_py import AsyncExa

from podscript.ai.models import LLM
from podscript.core.config import settings
from podscript.core.errors import PipelineTimeout
from podscript.models import ScriptContext, ScriptResult, SectionDraft, SectionSummary
from podscript.worker.expander import SectionExpander, assemble_script
from podscript.worker.normalizer import normalize_script
from podscript.worker.outline import synthesize_outline
from podscript.worker.tools import collect_research

logger = logging.getLogger(__name__)

# Below this share of the combined target a script is flagged as short
SHORT_SCRIPT_RATIO = 0.5

NORMALIZATION_EMPTY = "No speaker utterances could be parsed from the generated script"


def summarize(draft: SectionDraft) -> SectionSummary:
    return SectionSummary(
        unit_id=draft.unit_id,
        label=draft.label,
        target=draft.target,
        word_count=draft.word_count,
        iterations=draft.iterations,
        status=draft.status,
    )


def collect_warnings(drafts: list[SectionDraft], utterance_count: int) -> list[str]:
    warnings = []
    for draft in drafts:
        if draft.status in ("stalled", "ceiling_reached"):
            warnings.append(
                f"{draft.label} stopped below target ({draft.status}): "
                f"{draft.word_count}/{draft.target} words"
            )

    word_count = sum(d.word_count for d in drafts)
    target = sum(d.target for d in drafts)
    if word_count < target * SHORT_SCRIPT_RATIO:
        warnings.append(f"Script is far short of its length target: {word_count}/{target} words")

    if utterance_count == 0:
        warnings.append(NORMALIZATION_EMPTY)
    return warnings


class ScriptPipeline:
    def __init__(
        self,
        llm: LLM,
        expander: SectionExpander | None = None,
        search_client: AsyncExa | None = None,
        subtopic_count: int = settings.outline_subtopics,
        deadline: float | None = settings.pipeline_deadline_seconds,
    ):
        self.llm = llm
        self.expander = expander or SectionExpander(llm)
        self.search_client = search_client
        self.subtopic_count = subtopic_count
        self.deadline = deadline

    async def run(self, topic: str, prompt: str | None = None) -> ScriptResult:
        try:
            async with asyncio.timeout(self.deadline):
                return await self._run(topic, prompt)
        except TimeoutError as e:
            logger.error("Script pipeline for %r exceeded %ss", topic, self.deadline)
            raise PipelineTimeout(f"Script generation exceeded {self.deadline}s") from e

    async def _run(self, topic: str, prompt: str | None) -> ScriptResult:
        # Research
        research = await collect_research(topic, client=self.search_client)

        # Outline
        outline = await synthesize_outline(
            research, self.llm, instruction=prompt, subtopic_count=self.subtopic_count
        )

        # Expand
        context = ScriptContext(
            topic=topic, title=outline.title, keywords=research.top_keywords, prompt=prompt
        )
        drafts = await self.expander.expand(outline, context)
        raw_text = assemble_script(drafts)

        # Normalize
        script = normalize_script(raw_text)
        warnings = collect_warnings(drafts, len(script))
        for warning in warnings:
            logger.warning("%s: %s", topic, warning)

        return ScriptResult(
            title=outline.title,
            script=script,
            outline=outline,
            raw_text=raw_text,
            sections=[summarize(d) for d in drafts],
            word_count=sum(d.word_count for d in drafts),
            target_word_count=sum(d.target for d in drafts),
            warnings=warnings,
        )
