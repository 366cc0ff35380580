import asyncio
import logging
from dataclasses import dataclass
from string import Template

from podscript.ai import prompts
from podscript.ai.models import LLM, GenerationOptions
from podscript.core.config import settings
from podscript.models import Outline, ScriptContext, SectionDraft, UnitId

logger = logging.getLogger(__name__)

MAX_SECTION_TOKENS = 3000
TOKENS_PER_WORD = 4


@dataclass
class ExpansionTargets:
    intro: int = settings.intro_target_words
    subtopic: int = settings.subtopic_target_words
    conclusion: int = settings.conclusion_target_words


@dataclass
class OutlineUnit:
    unit_id: UnitId
    label: str
    name: str
    details: str
    target: int


def bullet_list(items: list[str]) -> str:
    return "\n".join(f"    * {item}" for item in items) or "    * (none)"


def outline_units(outline: Outline, targets: ExpansionTargets) -> list[OutlineUnit]:
    intro = outline.introduction
    units = [
        OutlineUnit(
            unit_id="intro",
            label="INTRODUCTION",
            name="introduction",
            details=(
                f"1. Hook: {intro.hook}\n"
                f"2. Main themes:\n{bullet_list(intro.main_themes)}\n"
                f"3. Narrative setup: {intro.narrative_setup}"
            ),
            target=targets.intro,
        )
    ]

    total = len(outline.subtopics)
    for index, subtopic in enumerate(outline.subtopics):
        units.append(
            OutlineUnit(
                unit_id=index,
                label=f"SUBTOPIC {index + 1}",
                name=f"main segment {index + 1} of {total}, titled '{subtopic.title}'",
                details=(
                    f"1. Title: {subtopic.title}\n"
                    f"2. Key point: {subtopic.key_point}\n"
                    f"3. Supporting evidence: {subtopic.supporting_evidence}\n"
                    f"4. Narrative connection: {subtopic.narrative_connection}"
                ),
                target=targets.subtopic,
            )
        )

    conclusion = outline.conclusion
    units.append(
        OutlineUnit(
            unit_id="conclusion",
            label="CONCLUSION",
            name="conclusion",
            details=(
                f"1. Key insights:\n{bullet_list(conclusion.key_insights)}\n"
                f"2. Fascinating elements:\n{bullet_list(conclusion.fascinating_elements)}\n"
                f"3. Final thoughts: {conclusion.final_thoughts}"
            ),
            target=targets.conclusion,
        )
    )
    return units


def build_section_prompt(
    unit: OutlineUnit, context: ScriptContext, previous: str, remaining: int
) -> str:
    instruction = (
        f"5. Additional instruction: {context.prompt}"
        if context.prompt
        else prompts.default_instruction
    )
    return Template(prompts.section_user).substitute(
        section=unit.name,
        topic=context.topic,
        title=context.title,
        keywords=", ".join(context.keywords),
        details=unit.details,
        previous=previous or "(none yet, this is the start of the section)",
        remaining=remaining,
        instruction=instruction,
    )


def assemble_script(drafts: list[SectionDraft]) -> str:
    return "\n\n".join(f"{d.label}:\n{d.accumulated_text}" for d in drafts)


class SectionExpander:
    def __init__(
        self,
        llm: LLM,
        targets: ExpansionTargets | None = None,
        max_iterations: int = settings.max_expansion_iterations,
        concurrency: int = settings.expansion_concurrency,
    ):
        self.llm = llm
        self.targets = targets or ExpansionTargets()
        self.max_iterations = max_iterations
        self.concurrency = max(1, concurrency)

    async def expand_unit(self, unit: OutlineUnit, context: ScriptContext) -> SectionDraft:
        draft = SectionDraft(unit_id=unit.unit_id, label=unit.label, target=unit.target)

        while draft.word_count < draft.target:
            if draft.iterations >= self.max_iterations:
                draft.status = "ceiling_reached"
                logger.warning(
                    "%s hit the iteration ceiling (%d) at %d/%d words",
                    unit.label,
                    self.max_iterations,
                    draft.word_count,
                    draft.target,
                )
                break

            remaining = draft.target - draft.word_count
            text = await self.llm.complete(
                build_section_prompt(unit, context, draft.accumulated_text, remaining),
                GenerationOptions(
                    temperature=0.7,
                    max_output_tokens=min(remaining * TOKENS_PER_WORD, MAX_SECTION_TOKENS),
                    system_instruction=prompts.section_system,
                    thinking_budget=0,
                ),
            )
            draft.iterations += 1

            if not text.strip():
                draft.status = "stalled"
                logger.warning(
                    "%s stalled at %d/%d words after %d iterations",
                    unit.label,
                    draft.word_count,
                    draft.target,
                    draft.iterations,
                )
                break

            draft.append(text)
        else:
            draft.status = "target_reached"

        logger.info(
            "%s finished (%s): %d/%d words in %d iterations",
            unit.label,
            draft.status,
            draft.word_count,
            draft.target,
            draft.iterations,
        )
        return draft

    async def expand(self, outline: Outline, context: ScriptContext) -> list[SectionDraft]:
        """Expands every outline unit. Drafts come back in outline order."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(unit: OutlineUnit) -> SectionDraft:
            async with semaphore:
                return await self.expand_unit(unit, context)

        tasks = [asyncio.ensure_future(run(unit)) for unit in outline_units(outline, self.targets)]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
